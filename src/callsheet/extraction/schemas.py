"""Pydantic models for the engine's input/output contract and model replies."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .fast.confidence import confidence_level
from .types import ContactCandidate

MethodName = Literal["heuristic", "model", "hybrid", "auto"]

_PLACEHOLDERS = {"", "unknown", "n/a", "na", "none", "null", "-", "tbd", "not provided"}


class ExtractionOptions(BaseModel):
    """Per-call options. camelCase keys from JSON callers are accepted."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    role_preferences: list[str] = Field(default_factory=list, alias="rolePreferences")
    confidence_threshold: float | None = Field(
        default=None, ge=0.0, le=1.0, alias="confidenceThreshold",
        description="Drop contacts scoring below this; engine default when unset",
    )
    preferred_method: MethodName | None = Field(default=None, alias="preferredMethod")
    use_multi_pass: bool | None = Field(default=None, alias="useMultiPass")


class ExtractionRequest(BaseModel):
    text: str
    options: ExtractionOptions = Field(default_factory=ExtractionOptions)


class ContactRecord(BaseModel):
    """A contact as handed to callers."""
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: str | None = None
    company: str | None = None
    department: str | None = None
    notes: str | None = None
    confidence: float
    confidence_level: str
    extraction_method: str
    section: str | None = None
    source_line: str | None = None

    @classmethod
    def from_candidate(cls, candidate: ContactCandidate) -> "ContactRecord":
        return cls(
            name=candidate.name,
            email=candidate.email,
            phone=candidate.phone,
            role=candidate.role,
            company=candidate.company,
            department=candidate.department,
            notes=candidate.notes,
            confidence=candidate.confidence,
            confidence_level=confidence_level(candidate.confidence),
            extraction_method=candidate.origin,
            section=candidate.section,
            source_line=candidate.source_line,
        )


class ExtractionResponse(BaseModel):
    success: bool
    contacts: list[ContactRecord] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class ModelContact(BaseModel):
    """One contact object as returned by the hosted model."""
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    role: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    department: str | None = None
    notes: str | None = None
    confidence: float | None = None

    @field_validator("name", "role", "email", "phone", "company", "department", "notes", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value if v is not None)
        text = " ".join(str(value).split())
        return None if text.lower() in _PLACEHOLDERS else text

    @field_validator("confidence", mode="before")
    @classmethod
    def _clean_confidence(cls, value: Any) -> float | None:
        if value is None or value == "":
            return None
        try:
            score = float(value)
        except (TypeError, ValueError):
            return None
        if score > 1.0:
            score = score / 100.0
        return max(0.0, min(1.0, score))
