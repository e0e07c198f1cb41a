"""Leaderboard failure taxonomy and recoverable-error policy helpers."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TypeAlias


class FailureKind(str, Enum):
    """Category of a failed leaderboard request."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    SERVICE = "service"
    PROTOCOL = "protocol"
    CLOSED = "closed"
    INTERNAL = "internal"


class AscndError(Exception):
    """Base class for failures recovered inside the leaderboard facade."""

    kind: FailureKind = FailureKind.INTERNAL


class ConfigurationError(AscndError):
    kind = FailureKind.CONFIGURATION


class RequestValidationError(AscndError):
    kind = FailureKind.VALIDATION


class TransportError(AscndError):
    kind = FailureKind.TRANSPORT


class RequestTimeoutError(AscndError):
    kind = FailureKind.TIMEOUT


class ProtocolError(AscndError):
    kind = FailureKind.PROTOCOL


class FacadeClosedError(AscndError):
    kind = FailureKind.CLOSED


class ServiceError(AscndError):
    """Remote rejection; carries the service error code and message verbatim."""

    kind = FailureKind.SERVICE

    def __init__(
        self,
        message: str,
        *,
        code: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


CREDENTIAL_NOT_CONFIGURED = "credential not configured"
FACADE_CLOSED = "leaderboard facade has been closed"

# Exceptions a codec or transport adapter may leak beyond the AscndError taxonomy.
RecoverableRequestErrors: TypeAlias = tuple[type[BaseException], ...]
RECOVERABLE_REQUEST_ERRORS: RecoverableRequestErrors = (
    RuntimeError,
    OSError,
    ValueError,
    TypeError,
    KeyError,
    AttributeError,
)


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *args: object,
    level: int = logging.DEBUG,
) -> None:
    """Emit structured observability for tolerated recoverable exceptions."""
    logger.log(level, message, *args, exc_info=True)


__all__ = [
    "AscndError",
    "CREDENTIAL_NOT_CONFIGURED",
    "ConfigurationError",
    "FACADE_CLOSED",
    "FacadeClosedError",
    "FailureKind",
    "ProtocolError",
    "RECOVERABLE_REQUEST_ERRORS",
    "RequestTimeoutError",
    "RequestValidationError",
    "ServiceError",
    "TransportError",
    "log_recoverable",
]
