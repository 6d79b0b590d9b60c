"""Translation dictionaries and dotted-key lookup."""

from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

from fastapi import Request

from flowhr.common.constants import LOCALE_COOKIE
from flowhr.i18n.config import DEFAULT_LOCALE, Locale, parse_locale

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).parent / "locales"

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def _read_dictionary(locale: Locale) -> dict[str, Any]:
    path = LOCALES_DIR / f"{locale.value}.json"
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} does not contain a JSON object")
    return data


@lru_cache(maxsize=None)
def load_messages(locale: Locale) -> dict[str, Any]:
    """Load one locale's dictionary, falling back to the default locale."""
    try:
        return _read_dictionary(locale)
    except (OSError, ValueError) as exc:
        if locale is DEFAULT_LOCALE:
            raise
        logger.error(
            "Failed to load translation for locale %s, falling back to %s: %s",
            locale.value, DEFAULT_LOCALE.value, exc,
        )
        return load_messages(DEFAULT_LOCALE)


def interpolate(template: str, params: Mapping[str, Any]) -> str:
    """Replace ``{{name}}`` placeholders; unknown names are left untouched."""

    def _sub(match: re.Match) -> str:
        name = match.group(1)
        return str(params[name]) if name in params else match.group(0)

    return _PLACEHOLDER_RE.sub(_sub, template)


class Translator:
    """Key lookup bound to one locale's dictionary."""

    def __init__(self, locale: Locale, messages: Mapping[str, Any]) -> None:
        self.locale = locale
        self.messages = messages

    def translate(self, key: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Walk the dotted key; return the key itself when nothing matches."""
        value: Any = self.messages
        for part in key.split("."):
            if isinstance(value, Mapping) and part in value:
                value = value[part]
            else:
                logger.warning(
                    "Translation not found for key: %s in locale: %s", key, self.locale.value,
                )
                return key

        if not isinstance(value, str):
            logger.warning(
                "Translation key %s in locale %s is not a string", key, self.locale.value,
            )
            return key
        if params:
            return interpolate(value, params)
        return value

    t = translate


def get_translator(locale: Locale) -> Translator:
    return Translator(locale, load_messages(locale))


def get_preferred_locale(request: Request) -> Locale:
    """FastAPI dependency: the caller's saved locale, or the default."""
    return parse_locale(request.cookies.get(LOCALE_COOKIE)) or DEFAULT_LOCALE
