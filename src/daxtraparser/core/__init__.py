"""Core request layer: token signing, resilient transport and the parser client."""

from __future__ import annotations

from .client import DaxtraErrorExtractor, DaxtraParserClient, TwoPhaseResult, dump_profile
from .signing import decode_token, sign_token
from .transport import (
    ErrorExtractor,
    ErrorInfo,
    RequestOptions,
    ResilientTransport,
    RetryPolicy,
)

__all__ = [
    "DaxtraErrorExtractor",
    "DaxtraParserClient",
    "TwoPhaseResult",
    "dump_profile",
    "sign_token",
    "decode_token",
    "ErrorExtractor",
    "ErrorInfo",
    "RequestOptions",
    "ResilientTransport",
    "RetryPolicy",
]
