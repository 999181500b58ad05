"""Exception taxonomy for DaXtra client failures."""

from __future__ import annotations

from typing import Any


class DaxtraError(Exception):
    """Base class for every error raised by the parser client."""

    error_type = "daxtra_error"
    default_status: int | None = 500

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | int | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status if status is not None else self.default_status
        self.code = code
        self.response_body = response_body

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.error_type, "message": self.message}
        if self.code is not None:
            payload["code"] = str(self.code)
        if self.status is not None:
            payload["status"] = self.status
        return payload

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return (
            f"{type(self).__name__}(status={self.status!r}, code={self.code!r}, "
            f"message={self.message!r})"
        )


class SigningError(DaxtraError):
    """Raised when an authentication token cannot be minted."""


class TransportError(DaxtraError):
    """Raised for non-2xx responses and network-layer failures.

    ``status`` is ``None`` when no HTTP response was received.
    """

    default_status = None


class RemoteApiError(TransportError):
    """Transport error carrying the remote ``CSERROR`` envelope."""


class ValidationError(DaxtraError):
    """Raised when a decoded payload does not match the expected profile shape."""


class DomainError(DaxtraError):
    """Raised when a 200 response carries a remote business error."""

    default_status = 400


class MissingContinuationTokenError(DomainError):
    """Phase one of two-phase parsing returned no continuation token."""


class UnexpectedResponseType(DaxtraError):
    """Raised when the remote returned the wrong kind of payload."""


__all__ = [
    "DaxtraError",
    "SigningError",
    "TransportError",
    "RemoteApiError",
    "ValidationError",
    "DomainError",
    "MissingContinuationTokenError",
    "UnexpectedResponseType",
]
