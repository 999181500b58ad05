"""DaXtra parser REST client with per-request JWT authentication."""

from __future__ import annotations

import base64
import dataclasses
from dataclasses import dataclass
from typing import Any, BinaryIO, TypeVar, Union
from urllib.parse import quote

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import (
    DomainError,
    MissingContinuationTokenError,
    RemoteApiError,
    UnexpectedResponseType,
    ValidationError,
)
from ..schemas import CandidateProfile, ClientSettings, VacancyProfile
from .signing import DEFAULT_TTL_SECONDS, sign_token
from .transport import DEFAULT_TIMEOUT_MS, ErrorInfo, RequestOptions, ResilientTransport

FULL_PROFILE_PATH = "/cvx/rest/api/v1/profile/full/json"
PERSONAL_PROFILE_PATH = "/cvx/rest/api/v1/profile/personal/json"
DATA_PATH = "/cvx/rest/api/v1/data"
JOB_ORDER_PATH = "/cvx/rest/api/v1/joborder/json"
CONVERT_HTML_PATH = "/cvx/rest/api/v1/convert2html"
CONVERT_HTML_HQ_PATH = "/cvx/rest/api/v1/convert2html_q"

TURBO_SUFFIX = "; -turbo"

# same reserved set as encodeURIComponent
_QUERY_SAFE = "!~*'()"

FileInput = Union[bytes, bytearray, memoryview, BinaryIO]
ProfileT = TypeVar("ProfileT", CandidateProfile, VacancyProfile)


class DaxtraErrorExtractor:
    """Reads the ``CSERROR`` envelope from failed responses."""

    def extract_error(self, status: int, body: Any) -> ErrorInfo:
        code: str | int | None = None
        message = f"HTTP {status}"
        if isinstance(body, dict) and isinstance(body.get("CSERROR"), dict):
            envelope = body["CSERROR"]
            code = envelope.get("code")
            message = envelope.get("message") or message
        return ErrorInfo(code=code, message=message)

    def create_error(
        self,
        status: int,
        message: str,
        code: str | int | None = None,
        body: Any = None,
    ) -> Exception:
        return RemoteApiError(message, status=status, code=code, response_body=body)


@dataclass(frozen=True, slots=True)
class TwoPhaseResult:
    """Results of personal-then-full parsing."""

    personal: CandidateProfile
    full: CandidateProfile


class DaxtraParserClient:
    """Client for full, two-phase, vacancy parsing and HTML conversion."""

    def __init__(
        self,
        base_url: str,
        account: str,
        jwt_secret: str | bytes,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        turbo: bool = False,
        *,
        token_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        transport: ResilientTransport | None = None,
    ) -> None:
        self._account = account
        self._jwt_secret = jwt_secret
        self._turbo = turbo
        self._token_ttl_seconds = token_ttl_seconds
        self._transport = transport or ResilientTransport(
            base_url,
            default_timeout_ms,
            DaxtraErrorExtractor(),
        )
        self._logger = structlog.get_logger(__name__)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs: Any) -> "DaxtraParserClient":
        return cls(
            settings.base_url,
            settings.account,
            settings.jwt_secret,
            settings.timeout_ms,
            settings.turbo,
            token_ttl_seconds=settings.token_ttl_seconds,
            **kwargs,
        )

    @property
    def account(self) -> str:
        return self._account

    @property
    def turbo(self) -> bool:
        return self._turbo

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    @property
    def account_with_turbo(self) -> str:
        return f"{self._account}{TURBO_SUFFIX}" if self._turbo else self._account

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "DaxtraParserClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def parse_full_resume(
        self,
        file: FileInput,
        filename: str | None = None,
        options: RequestOptions | None = None,
    ) -> CandidateProfile:
        """Parse a resume into a full candidate profile in one request."""
        response = self._upload(FULL_PROFILE_PATH, file, filename or "resume", options)
        profile = self._validate(CandidateProfile, response, "candidate profile")
        self._logger.info("daxtra.parse_full.completed", filename=filename)
        return profile

    def parse_personal_then_full(
        self,
        file: FileInput,
        filename: str | None = None,
        options: RequestOptions | None = None,
    ) -> TwoPhaseResult:
        """Parse personal details first, then redeem the continuation token.

        Phase one posts the document base64-encoded in a JSON body. Each phase
        mints its own token.
        """
        payload = {
            "account": self.account_with_turbo,
            "file": base64.b64encode(_read_bytes(file)).decode("ascii"),
        }
        phase1 = self._transport.request(
            "POST",
            PERSONAL_PROFILE_PATH,
            body=payload,
            options=self._authorize(options),
        )
        personal = self._validate(CandidateProfile, phase1, "candidate profile")

        token = personal.continuation_token
        if not token:
            raise MissingContinuationTokenError(
                "No phase2_token or full_profile_token received from personal parsing",
                response_body=phase1,
            )
        self._logger.info("daxtra.two_phase.personal_completed", filename=filename)

        phase2 = self._transport.request(
            "GET",
            f"{DATA_PATH}?token={quote(token, safe=_QUERY_SAFE)}",
            options=self._authorize(options),
        )
        full = self._validate(CandidateProfile, phase2, "candidate profile")
        self._logger.info("daxtra.two_phase.completed", filename=filename)
        return TwoPhaseResult(personal=personal, full=full)

    def parse_job_order(
        self,
        file: FileInput,
        filename: str | None = None,
        options: RequestOptions | None = None,
    ) -> VacancyProfile:
        """Parse a job order document into a vacancy profile."""
        response = self._upload(JOB_ORDER_PATH, file, filename or "joborder", options)
        profile = self._validate(VacancyProfile, response, "vacancy profile")
        self._logger.info("daxtra.parse_job_order.completed", filename=filename)
        return profile

    def convert_to_html(
        self,
        file: FileInput,
        high_quality: bool = False,
        filename: str | None = None,
        options: RequestOptions | None = None,
    ) -> str:
        """Convert a document to HTML."""
        path = CONVERT_HTML_HQ_PATH if high_quality else CONVERT_HTML_PATH
        response = self._upload(path, file, filename or "document", options)
        if not isinstance(response, str):
            raise UnexpectedResponseType(
                "Expected HTML string response from convert2html",
                response_body=response,
            )
        self._logger.info(
            "daxtra.convert_html.completed",
            filename=filename,
            high_quality=high_quality,
            length=len(response),
        )
        return response

    def _upload(
        self,
        path: str,
        file: FileInput,
        filename: str,
        options: RequestOptions | None,
    ) -> Any:
        return self._transport.request(
            "POST",
            path,
            body={"account": self.account_with_turbo},
            files={"file": (filename, _read_bytes(file))},
            is_multipart=True,
            options=self._authorize(options),
        )

    def _authorize(self, options: RequestOptions | None) -> RequestOptions:
        token = sign_token(self._account, self._jwt_secret, self._token_ttl_seconds)
        return dataclasses.replace(options or RequestOptions(), jwt=token)

    @staticmethod
    def _validate(model: type[ProfileT], response: Any, label: str) -> ProfileT:
        try:
            result = model.model_validate(response)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Invalid {label} response format",
                response_body=response,
            ) from exc
        if result.CSERROR is not None:
            raise DomainError(
                result.CSERROR.message or "API returned error",
                code=result.CSERROR.code,
                response_body=response,
            )
        return result


def _read_bytes(file: FileInput) -> bytes:
    if isinstance(file, (bytes, bytearray, memoryview)):
        return bytes(file)
    return file.read()


def dump_profile(profile: BaseModel) -> dict[str, Any]:
    """Serialize a profile back to the remote's JSON shape."""
    return profile.model_dump(mode="json", exclude_none=True)


__all__ = [
    "DaxtraErrorExtractor",
    "DaxtraParserClient",
    "TwoPhaseResult",
    "dump_profile",
    "FULL_PROFILE_PATH",
    "PERSONAL_PROFILE_PATH",
    "DATA_PATH",
    "JOB_ORDER_PATH",
    "CONVERT_HTML_PATH",
    "CONVERT_HTML_HQ_PATH",
    "TURBO_SUFFIX",
]
