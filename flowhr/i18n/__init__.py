"""Internationalization — locale dictionaries and dotted-key lookup."""

from flowhr.i18n.config import DEFAULT_LOCALE, Locale, is_rtl
from flowhr.i18n.service import Translator, get_translator, load_messages

__all__ = [
    "DEFAULT_LOCALE",
    "Locale",
    "Translator",
    "get_translator",
    "is_rtl",
    "load_messages",
]
