"""DaXtra parser client library and proxy service."""

from __future__ import annotations

__version__ = "1.0.0"

from .competencies import extract_competencies, summarize_competencies
from .core import (
    DaxtraErrorExtractor,
    DaxtraParserClient,
    RequestOptions,
    ResilientTransport,
    RetryPolicy,
    TwoPhaseResult,
    sign_token,
)
from .errors import (
    DaxtraError,
    DomainError,
    MissingContinuationTokenError,
    RemoteApiError,
    SigningError,
    TransportError,
    UnexpectedResponseType,
    ValidationError,
)

__all__ = [
    "__version__",
    "DaxtraParserClient",
    "DaxtraErrorExtractor",
    "ResilientTransport",
    "RequestOptions",
    "RetryPolicy",
    "TwoPhaseResult",
    "sign_token",
    "extract_competencies",
    "summarize_competencies",
    "DaxtraError",
    "DomainError",
    "MissingContinuationTokenError",
    "RemoteApiError",
    "SigningError",
    "TransportError",
    "UnexpectedResponseType",
    "ValidationError",
]
