"""Enums and constants shared by the proxy and i18n modules."""

from __future__ import annotations

import enum

APP_VERSION = "1.0.0"

REQUEST_ID_HEADER = "X-Request-ID"

# Cookies
TOKEN_COOKIE = "token"
LOCALE_COOKIE = "preferred-locale"
LOCALE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


# ── Proxy ───────────────────────────────────────────────────────────

class BodyKind(str, enum.Enum):
    """How the inbound request body is read and forwarded."""

    none = "none"
    json = "json"
    multipart = "multipart"


class CredentialSource(str, enum.Enum):
    """Where a route looks for the caller's bearer token."""

    header = "header"
    cookie_or_header = "cookie_or_header"


class ErrorRelay(str, enum.Enum):
    """How an upstream non-2xx body is turned into the gateway's body."""

    passthrough = "passthrough"
    message = "message"


# Generic messages returned to the caller
MSG_UNAUTHORIZED = "Unauthorized"
MSG_CONNECT_FAILED = "Failed to connect to backend service"
MSG_HTML_RESPONSE = "Server returned an error page"
MSG_INVALID_RESPONSE = "Invalid response from backend service"
MSG_INTERNAL_ERROR = "Internal server error"
MSG_BACKEND_ERROR = "Backend error"
MSG_UNKNOWN_ERROR = "Unknown error"
MSG_INVALID_JSON = "Request body must be valid JSON"
MSG_INVALID_FORM = "Request body must be multipart form data"

# Fixed per-request budget for the single upstream attempt (seconds)
UPSTREAM_TIMEOUT_SECONDS = 30.0
UPSTREAM_CONNECT_TIMEOUT_SECONDS = 10.0
