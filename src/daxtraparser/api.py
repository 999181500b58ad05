"""FastAPI proxy exposing the parser client over HTTP."""

from __future__ import annotations

from typing import Any

import pendulum
import structlog
from fastapi import Depends, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from . import __version__
from .competencies import summarize_competencies
from .container import ParserContainer
from .core import dump_profile
from .errors import DaxtraError
from .logging import CORRELATION_HEADER, bind_request_context
from .schemas import ServiceSettings
from .services import ConversionService, JobVacancyService, ResumeParsingService

logger = structlog.get_logger(__name__)


class UploadRejected(Exception):
    """Raised when an uploaded file is missing or exceeds the size limit."""

    def __init__(self, payload: dict[str, Any]) -> None:
        super().__init__(str(payload))
        self.payload = payload


def create_app(
    container: ParserContainer,
    service_settings: ServiceSettings | None = None,
) -> FastAPI:
    """Build the proxy application around ``container``."""

    settings = service_settings or ServiceSettings()
    app = FastAPI(
        title="DaXtra Parser Service",
        version=__version__,
        description="Proxy for DaXtra resume, vacancy and HTML conversion endpoints",
    )
    app.state.container = container
    app.state.max_upload_bytes = settings.max_upload_bytes

    @app.middleware("http")
    async def correlate_request(request: Request, call_next):
        correlation_id = bind_request_context(
            request.headers.get(CORRELATION_HEADER),
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        logger.info("api.request_completed", status=response.status_code)
        return response

    @app.exception_handler(UploadRejected)
    async def upload_rejected_handler(request: Request, exc: UploadRejected) -> JSONResponse:
        return JSONResponse(status_code=400, content=exc.payload)

    @app.exception_handler(DaxtraError)
    async def daxtra_error_handler(request: Request, exc: DaxtraError) -> JSONResponse:
        logger.error(
            "api.daxtra_error",
            path=request.url.path,
            error_type=type(exc).__name__,
            status=exc.status,
            code=exc.code,
            message=exc.message,
        )
        return JSONResponse(
            status_code=exc.status or 502,
            content={"success": False, "error": exc.to_dict()},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api.internal_error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {"type": "internal_error", "message": "An unexpected error occurred"},
            },
        )

    @app.get("/healthz")
    def health() -> dict[str, Any]:
        client = container.client()
        return {
            "status": "healthy",
            "service": "parser-microservice",
            "version": __version__,
            "timestamp": pendulum.now("UTC").to_iso8601_string(),
            "daxtra": {
                "base_url": client.base_url,
                "account": client.account,
                "turbo": client.turbo,
            },
        }

    @app.post("/resume/full")
    def parse_full_resume(
        request: Request,
        file: UploadFile | None = File(None),
        service: ResumeParsingService = Depends(_resume_service),
    ) -> dict[str, Any]:
        content, file_info = _read_upload(request, file)
        result = service.parse_full_resume(content, file_info["original_name"])
        competencies = [item.to_payload() for item in result["competencies"]]
        return _success(
            {
                "parsing_method": "full",
                "file_info": file_info,
                "profile": dump_profile(result["profile"]),
                "competencies": competencies,
                "summary": summarize_competencies(result["competencies"]),
            }
        )

    @app.post("/resume/two-phase")
    def parse_two_phase(
        request: Request,
        file: UploadFile | None = File(None),
        service: ResumeParsingService = Depends(_resume_service),
    ) -> dict[str, Any]:
        content, file_info = _read_upload(request, file)
        result = service.parse_personal_then_full(content, file_info["original_name"])
        return _success(
            {
                "parsing_method": "two-phase",
                "file_info": file_info,
                "personal": dump_profile(result["personal"]),
                "full": dump_profile(result["full"]),
                "competencies": [item.to_payload() for item in result["competencies"]],
                "summary": summarize_competencies(result["competencies"]),
            }
        )

    @app.post("/vacancy")
    def parse_vacancy(
        request: Request,
        file: UploadFile | None = File(None),
        service: JobVacancyService = Depends(_vacancy_service),
    ) -> dict[str, Any]:
        content, file_info = _read_upload(request, file)
        profile = service.parse_job_order(content, file_info["original_name"])
        return _success(
            {
                "parsing_method": "vacancy",
                "file_info": file_info,
                "profile": dump_profile(profile),
            }
        )

    @app.post("/convert/html")
    def convert_to_html(
        request: Request,
        file: UploadFile | None = File(None),
        high_quality_form: str | None = Form(None, alias="high_quality"),
        high_quality_query: str | None = Query(None, alias="high_quality"),
        service: ConversionService = Depends(_conversion_service),
    ) -> dict[str, Any]:
        content, file_info = _read_upload(request, file)
        high_quality = service.parse_high_quality_option(
            {"high_quality": high_quality_form},
            {"high_quality": high_quality_query},
        )
        html = service.convert_to_html(content, high_quality, file_info["original_name"])
        return _success(
            {
                "html": html,
                "file_info": file_info,
                "conversion_options": {"high_quality": high_quality},
            }
        )

    return app


def _resume_service(request: Request) -> ResumeParsingService:
    return request.app.state.container.resume_service()


def _vacancy_service(request: Request) -> JobVacancyService:
    return request.app.state.container.vacancy_service()


def _conversion_service(request: Request) -> ConversionService:
    return request.app.state.container.conversion_service()


def _read_upload(request: Request, file: UploadFile | None) -> tuple[bytes, dict[str, Any]]:
    if file is None:
        raise UploadRejected({"error": "No file uploaded"})
    limit = request.app.state.max_upload_bytes
    content = file.file.read(limit + 1)
    if len(content) > limit:
        raise UploadRejected(
            {
                "success": False,
                "error": {
                    "type": "file_too_large",
                    "message": f"File size exceeds {limit // (1024 * 1024)}MB limit",
                },
            }
        )
    file_info = {
        "original_name": file.filename or "upload",
        "size_kb": int(len(content) / 1024 + 0.5),
        "mime_type": file.content_type or "application/octet-stream",
    }
    return content, file_info


def _success(data: dict[str, Any]) -> dict[str, Any]:
    return {"success": True, "data": data}


__all__ = ["create_app", "UploadRejected"]
