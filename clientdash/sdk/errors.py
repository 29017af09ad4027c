"""
Error contract of the API access layer.

Every failure surfaces as one :class:`ApiError`, tagged with an
:class:`ErrorKind` derived from the HTTP status. Callers branch on ``kind``
instead of on exception subclasses.
"""

import enum
from typing import Any, Optional

DEFAULT_ERROR_MESSAGE = "An error occurred"


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not-found"
    SERVER = "server"
    NETWORK = "network"


def kind_for_status(status: int) -> ErrorKind:
    """
    Map an HTTP status to an error kind.

    401/403 are auth failures, 404 is not-found, any other 4xx is a
    validation failure and everything else (5xx, unexpected 1xx/3xx) is a
    server failure.
    """
    if status in (401, 403):
        return ErrorKind.AUTH
    if status == 404:
        return ErrorKind.NOT_FOUND
    if 400 <= status < 500:
        return ErrorKind.VALIDATION
    return ErrorKind.SERVER


def message_from_payload(payload: Any) -> str:
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
    return DEFAULT_ERROR_MESSAGE


class ApiError(Exception):
    """
    A failed exchange with the remote service.

    Attributes:
        status: HTTP status, or None when no response was received
        message: Server-supplied ``message`` field or a default
        kind: Failure category
    """

    def __init__(self, status: Optional[int], message: str = DEFAULT_ERROR_MESSAGE,
                 kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        if kind is None:
            kind = kind_for_status(status) if status is not None else ErrorKind.NETWORK
        self.kind = kind

    @classmethod
    def from_response(cls, status: int, payload: Any) -> "ApiError":
        return cls(status, message_from_payload(payload))

    @classmethod
    def network(cls, message: str) -> "ApiError":
        return cls(None, message, ErrorKind.NETWORK)

    @property
    def is_auth(self) -> bool:
        return self.kind is ErrorKind.AUTH

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    def __repr__(self):
        return f"ApiError(status={self.status!r}, kind={self.kind.value!r}, message={self.message!r})"
