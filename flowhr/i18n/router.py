"""i18n endpoints — locale list, dictionaries, lookup and preference."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from flowhr.common.constants import LOCALE_COOKIE, LOCALE_COOKIE_MAX_AGE
from flowhr.common.exceptions import BadRequestException, NotFoundException
from flowhr.i18n.config import (
    DEFAULT_LOCALE,
    LOCALE_NAMES,
    Locale,
    is_rtl,
    parse_locale,
)
from flowhr.i18n.schemas import (
    LocaleInfo,
    LocalesResponse,
    MessagesResponse,
    PreferenceResponse,
    PreferenceUpdate,
    TranslationResponse,
)
from flowhr.i18n.service import get_preferred_locale, get_translator, load_messages

router = APIRouter(prefix="", tags=["i18n"])


# ── GET /locales — supported languages ──────────────────────────────

@router.get("/locales", response_model=LocalesResponse)
async def list_locales(preferred: Locale = Depends(get_preferred_locale)):
    return LocalesResponse(
        locales=[
            LocaleInfo(code=locale, name=LOCALE_NAMES[locale], rtl=is_rtl(locale))
            for locale in Locale
        ],
        default=DEFAULT_LOCALE,
        preferred=preferred,
    )


# ── GET /messages/{locale} — full dictionary ────────────────────────

@router.get("/messages/{locale}", response_model=MessagesResponse)
async def get_messages(locale: str):
    """Return the whole translation dictionary for one locale."""
    parsed = parse_locale(locale)
    if parsed is None:
        raise NotFoundException("Locale", locale)
    return MessagesResponse(locale=parsed, rtl=is_rtl(parsed), messages=load_messages(parsed))


# ── GET /translate — single key lookup ──────────────────────────────

@router.get("/translate", response_model=TranslationResponse)
async def translate(
    request: Request,
    key: str = Query(..., min_length=1, description="Dotted key, e.g. leave.status.pending"),
    locale: Optional[str] = Query(default=None, description="Defaults to the saved preference"),
    preferred: Locale = Depends(get_preferred_locale),
):
    """Look up one key; extra query parameters fill ``{{name}}`` placeholders."""
    target = preferred
    if locale is not None:
        target = parse_locale(locale)
        if target is None:
            raise BadRequestException(f"Unsupported locale '{locale}'")

    params = {
        name: value
        for name, value in request.query_params.items()
        if name not in ("key", "locale")
    }
    value = get_translator(target).translate(key, params)
    return TranslationResponse(locale=target, key=key, value=value)


# ── PUT /preference — persist the UI language ───────────────────────

@router.put("/preference", response_model=PreferenceResponse)
async def set_preference(body: PreferenceUpdate, response: Response):
    locale = parse_locale(body.locale)
    if locale is None:
        raise BadRequestException(
            f"Unsupported locale '{body.locale}'",
            errors={"locale": [f"Must be one of: {', '.join(l.value for l in Locale)}"]},
        )
    response.set_cookie(
        LOCALE_COOKIE,
        locale.value,
        max_age=LOCALE_COOKIE_MAX_AGE,
        samesite="lax",
    )
    return PreferenceResponse(locale=locale, rtl=is_rtl(locale))
