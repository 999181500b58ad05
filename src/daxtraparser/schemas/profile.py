"""Response envelopes returned by the DaXtra parser."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CsError(BaseModel):
    """Remote error envelope (``CSERROR``)."""

    code: str | int
    message: str | None = None

    model_config = ConfigDict(extra="allow")


class ResumeEnvelope(BaseModel):
    """Wrapper used by some endpoints around ``StructuredResume``."""

    StructuredResume: Any = None

    model_config = ConfigDict(extra="allow")


class CandidateProfile(BaseModel):
    """Candidate profile returned by resume parsing endpoints.

    The structured resume may sit at the top level or under ``Resume``.
    ``phase2_token`` and the legacy ``full_profile_token`` carry the two-phase
    continuation token.
    """

    Resume: ResumeEnvelope | None = None
    StructuredResume: Any = None
    CSERROR: CsError | None = None
    full_profile_token: str | None = None
    phase2_token: str | None = None

    model_config = ConfigDict(extra="allow")

    @property
    def structured_resume(self) -> Any:
        if self.StructuredResume:
            return self.StructuredResume
        if self.Resume is not None:
            return self.Resume.StructuredResume
        return None

    @property
    def continuation_token(self) -> str | None:
        return self.phase2_token or self.full_profile_token


class VacancyProfile(BaseModel):
    """Job order profile returned by the vacancy endpoint."""

    StructuredResume: Any = None
    CSERROR: CsError | None = None

    model_config = ConfigDict(extra="allow")


class Competency(BaseModel):
    """Flattened skill record."""

    skill_name: str | None = Field(default=None, alias="skillName")
    auth: bool | None = None
    skill_level: int | float | None = Field(default=None, alias="skillLevel")
    skill_proficiency: str | None = Field(default=None, alias="skillProficiency")
    skill_alias_array: list[str] | None = Field(default=None, alias="skillAliasArray")
    last_used: str | None = Field(default=None, alias="lastUsed")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
