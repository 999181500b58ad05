"""Pydantic schema definitions for remote payloads and configuration."""

from __future__ import annotations

from .config import AppConfig, ClientSettings, ServiceSettings
from .profile import (
    CandidateProfile,
    Competency,
    CsError,
    ResumeEnvelope,
    VacancyProfile,
)

__all__ = [
    "AppConfig",
    "ClientSettings",
    "ServiceSettings",
    "CandidateProfile",
    "Competency",
    "CsError",
    "ResumeEnvelope",
    "VacancyProfile",
]
