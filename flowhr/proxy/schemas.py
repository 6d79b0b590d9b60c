"""Data shapes passed between the proxy router, route hooks and service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from flowhr.common.constants import (
    MSG_BACKEND_ERROR,
    MSG_UNAUTHORIZED,
    BodyKind,
    CredentialSource,
    ErrorRelay,
)

# (field name, (filename, content, content type))
FilePart = tuple[str, tuple[str, bytes, str]]


@dataclass
class OutboundRequest:
    """Everything needed to issue the single upstream call for one route.

    Built by the router from the inbound request, then optionally reshaped
    by the route's ``prepare`` hook before the service sends it.
    """

    path_params: dict[str, str] = field(default_factory=dict)
    query: list[tuple[str, str]] = field(default_factory=list)
    json: Any = None
    send_json: bool = False
    form: dict[str, list[str]] = field(default_factory=dict)
    files: list[FilePart] = field(default_factory=list)


@dataclass(frozen=True)
class ProxyRoute:
    """One row of the forwarding table.

    ``path`` is the inbound template (relative to ``/api``) and ``upstream``
    the template appended to the backend base URL; both use ``{name}``
    placeholders filled from the path parameters.
    """

    name: str
    method: str
    path: str
    upstream: str
    body: BodyKind = BodyKind.none
    credential: CredentialSource = CredentialSource.header
    unauthorized_detail: str = MSG_UNAUTHORIZED
    error_relay: ErrorRelay = ErrorRelay.passthrough
    error_fallback: str = MSG_BACKEND_ERROR
    forward_query: bool = False
    prepare: Optional[Callable[[OutboundRequest], None]] = None
