"""i18n Pydantic v2 schemas."""

from typing import Any

from pydantic import BaseModel

from flowhr.i18n.config import Locale


class LocaleInfo(BaseModel):
    code: Locale
    name: str
    rtl: bool


class LocalesResponse(BaseModel):
    """Supported locales plus the caller's current preference."""

    locales: list[LocaleInfo]
    default: Locale
    preferred: Locale


class MessagesResponse(BaseModel):
    locale: Locale
    rtl: bool
    messages: dict[str, Any]


class TranslationResponse(BaseModel):
    locale: Locale
    key: str
    value: str


class PreferenceUpdate(BaseModel):
    locale: str


class PreferenceResponse(BaseModel):
    locale: Locale
    rtl: bool
