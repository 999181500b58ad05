"""Flatten the nested skill collection of a candidate profile."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .schemas import CandidateProfile, Competency

TOP_SKILL_LEVEL = 8
TOP_SKILL_LIMIT = 10


def extract_competencies(profile: CandidateProfile | Mapping[str, Any] | Any) -> list[Competency]:
    """Return the profile's competencies as a flat list.

    ``Competency`` may be a single object or a list; non-object entries are
    dropped and any unexpected shape yields an empty list.
    """
    resume = _structured_resume(profile)
    if not isinstance(resume, Mapping):
        return []

    raw = resume.get("Competency")
    if not raw:
        return []
    entries = raw if isinstance(raw, list) else [raw]

    competencies: list[Competency] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        competency = _to_competency(entry)
        if competency is not None:
            competencies.append(competency)
    return competencies


def summarize_competencies(competencies: Iterable[Competency]) -> dict[str, Any]:
    """Count competencies and list the strongest ones."""
    items = list(competencies)
    top_skills = [
        {
            "name": item.skill_name,
            "level": item.skill_level,
            "proficiency": item.skill_proficiency,
        }
        for item in items
        if item.skill_level is not None and item.skill_level >= TOP_SKILL_LEVEL
    ][:TOP_SKILL_LIMIT]
    return {"total_competencies": len(items), "top_skills": top_skills}


def _structured_resume(profile: Any) -> Any:
    if isinstance(profile, CandidateProfile):
        return profile.structured_resume
    if isinstance(profile, BaseModel):
        profile = profile.model_dump()
    if not isinstance(profile, Mapping):
        return None
    resume = profile.get("StructuredResume")
    if resume:
        return resume
    envelope = profile.get("Resume")
    if isinstance(envelope, Mapping):
        return envelope.get("StructuredResume")
    return None


def _to_competency(entry: Mapping[str, Any]) -> Competency | None:
    level = entry.get("skillLevel")
    aliases = entry.get("skillAliasArray")
    fields = {
        "skillName": _string_or_none(entry.get("skillName")),
        "auth": entry.get("auth") if isinstance(entry.get("auth"), bool) else None,
        "skillLevel": level if isinstance(level, (int, float)) and not isinstance(level, bool) else None,
        "skillProficiency": _string_or_none(entry.get("skillProficiency")),
        "skillAliasArray": [str(alias) for alias in aliases] if isinstance(aliases, list) else None,
        "lastUsed": _string_or_none(entry.get("lastUsed")),
    }
    try:
        return Competency.model_validate(fields)
    except PydanticValidationError:
        return None


def _string_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


__all__ = ["extract_competencies", "summarize_competencies"]
