"""Structured logging for the parser client, CLI and proxy service.

Log lines go to stderr so CLI results on stdout stay machine readable. Request
scoped values (correlation id, route) are carried in structlog contextvars and
merged into every event emitted while a proxy request is being handled.
"""

from __future__ import annotations

import logging
import sys
import uuid
from typing import Any, MutableMapping, TextIO

import structlog

CORRELATION_HEADER = "X-Correlation-ID"
REDACTED = "[redacted]"
_SECRET_KEYS = frozenset({"authorization", "jwt", "jwt_secret", "secret", "token"})


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask values whose key names a credential (signed tokens, shared secret)."""
    for key in event_dict:
        if key.lower() in _SECRET_KEYS and event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(
    level: str = "INFO",
    *,
    stream: TextIO | None = None,
    json_output: bool = True,
) -> None:
    """Configure structlog; JSON lines by default, console rendering otherwise."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    output = stream or sys.stderr

    logging.basicConfig(level=log_level, format="%(message)s", stream=output)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            redact_secrets,
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(output),
        cache_logger_on_first_use=True,
    )


def bind_request_context(correlation_id: str | None = None, **values: Any) -> str:
    """Start a fresh log context for one proxy request and return its id."""
    correlation_id = correlation_id or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id, **values)
    return correlation_id


__all__ = [
    "CORRELATION_HEADER",
    "bind_request_context",
    "configure_logging",
    "redact_secrets",
]
