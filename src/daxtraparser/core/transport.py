"""HTTP transport with per-attempt timeouts, retry and pluggable error mapping."""

from __future__ import annotations

import json
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, NamedTuple, Protocol, runtime_checkable

import httpx
import structlog
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt

from ..errors import TransportError

DEFAULT_TIMEOUT_MS = 30_000
LEGACY_TOKEN_HEADER = "JWT"


class ErrorInfo(NamedTuple):
    code: str | int | None
    message: str | None


@runtime_checkable
class ErrorExtractor(Protocol):
    """Maps an error response body onto a domain-specific exception."""

    def extract_error(self, status: int, body: Any) -> ErrorInfo:
        """Return the remote error code and message found in ``body``."""

    def create_error(
        self,
        status: int,
        message: str,
        code: str | int | None = None,
        body: Any = None,
    ) -> Exception:
        """Build the exception raised for a failed response."""


@dataclass(frozen=True, slots=True)
class RequestOptions:
    """Per-call request settings."""

    timeout_ms: int | None = None
    token: str | None = None
    token_type: str = "Bearer"
    jwt: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Exponential backoff with proportional jitter."""

    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    max_jitter: float = 0.3

    def backoff(self, attempt: int, jitter_fraction: float) -> float:
        """Delay after failed ``attempt``; ``jitter_fraction`` is in ``[0, 1)``."""
        exponential = self.base_delay_seconds * (2 ** (attempt - 1))
        return exponential * (1 + jitter_fraction * self.max_jitter)

    @staticmethod
    def is_retryable_status(status: int) -> bool:
        return status == 429 or status >= 500


@dataclass(slots=True)
class RetryState:
    """Bookkeeping for one logical request."""

    attempt: int = 0
    last_status: int | None = None
    last_error: BaseException | None = None
    elapsed_backoff: float = 0.0


class ResilientTransport:
    """Send requests to a fixed base URL with retry on transient failures."""

    def __init__(
        self,
        base_url: str,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        error_extractor: ErrorExtractor | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        jitter: Callable[[], float] = random.random,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._default_timeout_ms = default_timeout_ms
        self._error_extractor = error_extractor
        self._policy = retry_policy or RetryPolicy()
        self._client = http_client or httpx.Client()
        self._owns_client = http_client is None
        self._sleep = sleep
        self._jitter = jitter
        self._clock = clock
        self._logger = structlog.get_logger(__name__)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def default_timeout_ms(self) -> int:
        return self._default_timeout_ms

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        files: Mapping[str, Any] | None = None,
        is_multipart: bool = False,
        options: RequestOptions | None = None,
    ) -> Any:
        """Issue ``method path`` and return the parsed response body.

        Returns ``None`` for an empty body, decoded JSON when possible and the raw
        text otherwise.
        """
        options = options or RequestOptions()
        timeout_ms = (
            self._default_timeout_ms if options.timeout_ms is None else options.timeout_ms
        )
        url = self._build_url(path)
        headers = self._build_headers(options)
        send_kwargs = self._encode_body(body, files, is_multipart, headers)
        state = RetryState()

        retrying = Retrying(
            stop=stop_after_attempt(self._policy.max_attempts),
            wait=self._wait,
            retry=retry_if_exception(lambda exc: self._should_retry(state, exc)),
            sleep=self._sleep,
            before_sleep=lambda retry_state: self._before_sleep(state, method, url, retry_state),
            reraise=True,
        )
        return retrying(
            self._attempt,
            state,
            method,
            url,
            headers,
            timeout_ms,
            send_kwargs,
        )

    def _attempt(
        self,
        state: RetryState,
        method: str,
        url: str,
        headers: dict[str, str],
        timeout_ms: int,
        send_kwargs: dict[str, Any],
    ) -> Any:
        state.attempt += 1
        state.last_status = None
        deadline = self._clock() + timeout_ms / 1000
        try:
            with self._client.stream(
                method,
                url,
                headers=headers,
                timeout=httpx.Timeout(self._remaining(deadline)),
                **send_kwargs,
            ) as response:
                content = self._read_until(response, deadline)
        except httpx.TimeoutException as exc:
            error = TransportError(f"Request timed out after {timeout_ms} ms", code="timeout")
            raise self._attempt_failed(state, method, url, error) from exc
        except httpx.HTTPError as exc:
            error = TransportError(f"Network error: {exc}", code="network_error")
            raise self._attempt_failed(state, method, url, error) from exc

        parsed = self._parse_body(content.decode(response.encoding or "utf-8", errors="replace"))
        if response.status_code >= 400:
            state.last_status = response.status_code
            error = self._create_error(response.status_code, parsed)
            raise self._attempt_failed(state, method, url, error)
        return parsed

    def _remaining(self, deadline: float) -> float:
        return max(deadline - self._clock(), 0.0)

    def _read_until(self, response: httpx.Response, deadline: float) -> bytes:
        """Read the whole body, giving up once ``deadline`` has passed."""
        chunks: list[bytes] = []
        if self._clock() >= deadline:
            raise httpx.ReadTimeout("attempt deadline exceeded", request=response.request)
        for chunk in response.iter_bytes():
            chunks.append(chunk)
            if self._clock() >= deadline:
                raise httpx.ReadTimeout("attempt deadline exceeded", request=response.request)
        return b"".join(chunks)

    def _attempt_failed(
        self,
        state: RetryState,
        method: str,
        url: str,
        error: Exception,
    ) -> Exception:
        state.last_error = error
        self._logger.warning(
            "transport.attempt_failed",
            method=method,
            url=url,
            attempt=state.attempt,
            status=state.last_status,
            code=getattr(error, "code", None),
            error=str(error),
        )
        return error

    def _should_retry(self, state: RetryState, exc: BaseException) -> bool:
        if state.last_status is not None:
            return self._policy.is_retryable_status(state.last_status)
        return isinstance(exc, TransportError)

    def _wait(self, retry_state: RetryCallState) -> float:
        return self._policy.backoff(retry_state.attempt_number, self._jitter())

    def _before_sleep(
        self,
        state: RetryState,
        method: str,
        url: str,
        retry_state: RetryCallState,
    ) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        state.elapsed_backoff += delay
        self._logger.warning(
            "transport.retry_scheduled",
            method=method,
            url=url,
            attempt=state.attempt,
            status=state.last_status,
            error=str(state.last_error),
            delay_seconds=round(delay, 3),
        )

    def _build_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}{path}"

    @staticmethod
    def _build_headers(options: RequestOptions) -> dict[str, str]:
        headers = dict(options.headers)
        if options.token:
            if options.token_type == "Bearer":
                headers["Authorization"] = f"Bearer {options.token}"
            else:
                headers[options.token_type] = options.token
        elif options.jwt:
            headers[LEGACY_TOKEN_HEADER] = options.jwt
        return headers

    @staticmethod
    def _encode_body(
        body: Any,
        files: Mapping[str, Any] | None,
        is_multipart: bool,
        headers: dict[str, str],
    ) -> dict[str, Any]:
        if is_multipart:
            # httpx sets the multipart boundary itself
            for name in [key for key in headers if key.lower() == "content-type"]:
                del headers[name]
            return {"data": body or {}, "files": files or {}}
        if body is None:
            return {}
        if not any(key.lower() == "content-type" for key in headers):
            headers["Content-Type"] = "application/json"
        if isinstance(body, (str, bytes)):
            return {"content": body}
        return {"content": json.dumps(body, ensure_ascii=False)}

    @staticmethod
    def _parse_body(text: str) -> Any:
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text

    def _create_error(self, status: int, body: Any) -> Exception:
        if self._error_extractor is None:
            return TransportError(f"HTTP {status}", status=status, response_body=body)
        info = self._error_extractor.extract_error(status, body)
        return self._error_extractor.create_error(
            status,
            info.message or f"HTTP {status}",
            info.code,
            body,
        )


__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "LEGACY_TOKEN_HEADER",
    "ErrorExtractor",
    "ErrorInfo",
    "RequestOptions",
    "RetryPolicy",
    "RetryState",
    "ResilientTransport",
]
