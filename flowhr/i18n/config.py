"""Locale configuration: the fixed set of supported UI languages."""

from __future__ import annotations

import enum


class Locale(str, enum.Enum):
    en = "en"
    tr = "tr"
    ar = "ar"


DEFAULT_LOCALE = Locale.en

LOCALE_NAMES: dict[Locale, str] = {
    Locale.en: "English",
    Locale.tr: "Türkçe",
    Locale.ar: "العربية",
}

RTL_LOCALES: frozenset[Locale] = frozenset({Locale.ar})


def is_rtl(locale: Locale) -> bool:
    return locale in RTL_LOCALES


def parse_locale(value: str | None) -> Locale | None:
    """Return the Locale for a code, or None when it is not supported."""
    if not value:
        return None
    try:
        return Locale(value)
    except ValueError:
        return None
