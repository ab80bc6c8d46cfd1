"""Core value types shared by every stage of the extraction pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    ROLE = "role"
    COMPANY = "company"


class Layout(str, Enum):
    TABULAR = "tabular"
    MULTILINE = "multiline"
    SECTIONED = "sectioned"
    MIXED = "mixed"


class Strategy(str, Enum):
    """Heuristic extraction strategies, in the order they are run."""

    LINE_BY_LINE = "line-by-line"
    MULTI_LINE = "multi-line"
    TABULAR = "tabular"
    SECTIONED = "sectioned"
    FREEFORM = "freeform"


# Origins that are not one of the five strategies.
PROXIMITY_ORIGIN = "proximity-linking"
MODEL_ORIGIN = "model"


@dataclass(frozen=True)
class RawObservation:
    """A single field value found somewhere in the text.

    Attributes:
        field_type: Which contact field the value belongs to.
        value: Normalized value (formatted phone, lower-cased email, ...).
        position: Character offset of the match in the source text.
        confidence: Weight of the rule that produced the match.
        origin: Name of the rule or strategy that produced it.
    """
    field_type: FieldType
    value: str
    position: int
    confidence: float
    origin: str


@dataclass(frozen=True)
class Section:
    name: str
    type: str
    start_line: int


@dataclass(frozen=True)
class DocumentStructure:
    """Layout hints computed once per document.

    Strategies read this but are never gated by it except where the router
    skips the tabular and multi-line extractors.
    """
    layout: Layout
    delimiter: str
    sections: tuple[Section, ...] = ()
    has_table_like_columns: bool = False
    has_multiline_stanzas: bool = False
    has_email_signals: bool = False
    has_phone_signals: bool = False
    line_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["layout"] = self.layout.value
        return data


@dataclass
class ContactCandidate:
    """A possibly partial contact record.

    Extractors create candidates and never touch them again. Fusion builds
    merged copies; the scorer and the enhancer return annotated copies with
    updated confidence, role and department.
    """
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: str | None = None
    company: str | None = None
    department: str | None = None
    notes: str | None = None
    confidence: float = 0.0
    origin: str = ""
    source_line: str | None = None
    line_number: int | None = None
    section: str | None = None
    section_type: str | None = None

    def is_valid(self) -> bool:
        """A candidate needs a name or at least one way to reach the person."""
        return bool((self.name and self.name.strip()) or self.email or self.phone)

    def field_count(self) -> int:
        return sum(1 for v in (self.name, self.email, self.phone, self.role, self.company) if v)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RoleSuggestion:
    role: str
    department: str
    priority: str
    message: str


@dataclass(frozen=True)
class ExtractionMetadata:
    structure: DocumentStructure | None
    strategies_used: tuple[str, ...] = ()
    raw_candidate_count: int = 0
    duplicates_removed: int = 0
    average_confidence: float = 0.0
    method: str = "heuristic"
    method_reason: str = ""
    production_type: str | None = None
    document_type: str | None = None
    suggestions: tuple[RoleSuggestion, ...] = ()
    chunks_total: int = 0
    chunks_failed: int = 0
    fallback_used: bool = False
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "structure": self.structure.to_dict() if self.structure else None,
            "strategies_used": list(self.strategies_used),
            "raw_candidate_count": self.raw_candidate_count,
            "duplicates_removed": self.duplicates_removed,
            "average_confidence": self.average_confidence,
            "method": self.method,
            "method_reason": self.method_reason,
            "production_type": self.production_type,
            "document_type": self.document_type,
            "suggestions": [asdict(s) for s in self.suggestions],
            "chunks_total": self.chunks_total,
            "chunks_failed": self.chunks_failed,
            "fallback_used": self.fallback_used,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ExtractionResult:
    contacts: tuple[ContactCandidate, ...]
    metadata: ExtractionMetadata = field(default_factory=lambda: ExtractionMetadata(structure=None))
