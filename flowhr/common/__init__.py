"""Common module — shared constants, exceptions, logging and rate limiting."""

from flowhr.common.constants import (
    BodyKind,
    CredentialSource,
    ErrorRelay,
)
from flowhr.common.exceptions import (
    AppException,
    BadRequestException,
    NotFoundException,
    UnauthorizedException,
    UpstreamException,
    UpstreamHTMLException,
    UpstreamResponseException,
    UpstreamUnavailableException,
    register_exception_handlers,
)

__all__ = [
    # Constants / Enums
    "BodyKind",
    "CredentialSource",
    "ErrorRelay",
    # Exceptions
    "AppException",
    "BadRequestException",
    "NotFoundException",
    "UnauthorizedException",
    "UpstreamException",
    "UpstreamHTMLException",
    "UpstreamResponseException",
    "UpstreamUnavailableException",
    "register_exception_handlers",
]
