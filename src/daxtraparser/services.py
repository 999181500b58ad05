"""Service layer shaping client results for the proxy endpoints."""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from .competencies import extract_competencies
from .core import DaxtraParserClient
from .schemas import VacancyProfile


class ResumeParsingService:
    """Resume parsing with competency extraction."""

    def __init__(self, client: DaxtraParserClient) -> None:
        self._client = client
        self._logger = structlog.get_logger(__name__)

    def parse_full_resume(self, content: bytes, filename: str) -> dict[str, Any]:
        profile = self._client.parse_full_resume(content, filename)
        competencies = extract_competencies(profile)
        self._logger.info(
            "resume.parsed", method="full", filename=filename, competencies=len(competencies)
        )
        return {"profile": profile, "competencies": competencies}

    def parse_personal_then_full(self, content: bytes, filename: str) -> dict[str, Any]:
        result = self._client.parse_personal_then_full(content, filename)
        competencies = extract_competencies(result.full)
        self._logger.info(
            "resume.parsed", method="two-phase", filename=filename, competencies=len(competencies)
        )
        return {"personal": result.personal, "full": result.full, "competencies": competencies}


class JobVacancyService:
    def __init__(self, client: DaxtraParserClient) -> None:
        self._client = client

    def parse_job_order(self, content: bytes, filename: str) -> VacancyProfile:
        return self._client.parse_job_order(content, filename)


class ConversionService:
    def __init__(self, client: DaxtraParserClient) -> None:
        self._client = client

    def convert_to_html(self, content: bytes, high_quality: bool, filename: str) -> str:
        return self._client.convert_to_html(content, high_quality, filename)

    @staticmethod
    def parse_high_quality_option(form: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
        """Only the literal string ``"true"`` enables high-quality conversion."""
        return form.get("high_quality") == "true" or query.get("high_quality") == "true"


__all__ = ["ResumeParsingService", "JobVacancyService", "ConversionService"]
