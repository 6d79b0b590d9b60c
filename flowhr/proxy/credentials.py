"""Bearer credential extraction for proxy routes."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from flowhr.common.constants import TOKEN_COOKIE, CredentialSource
from flowhr.common.exceptions import UnauthorizedException
from flowhr.proxy.schemas import ProxyRoute


def _bearer_from_header(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def extract_token(request: Request, source: CredentialSource) -> Optional[str]:
    """Return the caller's bearer token, or None when there is none.

    Cookie-enabled routes prefer the ``token`` cookie and fall back to the
    ``Authorization`` header.
    """
    if source is CredentialSource.cookie_or_header:
        cookie_token = request.cookies.get(TOKEN_COOKIE)
        if cookie_token:
            return cookie_token
    return _bearer_from_header(request)


def require_token(request: Request, route: ProxyRoute) -> str:
    """Like extract_token, but raise the route's 401 when absent."""
    token = extract_token(request, route.credential)
    if token is None:
        raise UnauthorizedException(route.unauthorized_detail)
    return token
