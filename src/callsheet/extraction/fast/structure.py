"""Document structure analysis and garbage-input detection.

The analyzer produces layout hints only. Every strategy still runs against
the full text; the router just uses the hints to pick which extra strategies
are worth running.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..errors import GarbageInputError
from ..types import DocumentStructure, Layout, Section
from .patterns import CANDIDATE_DELIMITERS, PatternLibrary, get_pattern_library

logger = logging.getLogger(__name__)

PDF_MARKERS: tuple[str, ...] = (
    "endobj", "stream", "endstream", "xref", "trailer", "startxref",
    "%%EOF", "/Type", "/Subtype", "/Filter",
)
_NON_PRINTABLE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]")
_COLUMN_SPLIT = re.compile(r"\t|\s{2,}|\s*\|\s*")


@dataclass(frozen=True)
class StructureConfig:
    """Tunable thresholds for layout detection."""
    sample_lines: int = 20
    column_consistency: float = 0.7
    min_columns: float = 3.0
    max_marker_count: int = 3
    max_non_printable_ratio: float = 0.2
    min_garbage_check_length: int = 10


def check_garbage(text: str, config: StructureConfig | None = None) -> None:
    """Raise GarbageInputError if *text* is raw PDF structure or binary noise."""
    config = config or StructureConfig()
    if len(text) < config.min_garbage_check_length:
        return

    markers = [m for m in PDF_MARKERS if m in text]
    if len(markers) >= config.max_marker_count:
        raise GarbageInputError(f"{len(markers)} PDF structure markers ({', '.join(markers)})")

    ratio = len(_NON_PRINTABLE.findall(text)) / len(text)
    if ratio > config.max_non_printable_ratio:
        raise GarbageInputError(f"{ratio:.0%} non-printable characters")


def detect_delimiter(text: str) -> str:
    counts = {d: text.count(d) for d in CANDIDATE_DELIMITERS}
    best = max(CANDIDATE_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] > 0 else "/"


def split_columns(line: str) -> list[str]:
    return [cell for cell in (c.strip() for c in _COLUMN_SPLIT.split(line.strip())) if cell]


def detect_columns(lines: list[str], config: StructureConfig) -> bool:
    sample = [line for line in lines if line.strip()][: config.sample_lines]
    if not sample:
        return False
    counts = [len(split_columns(line)) for line in sample]
    avg = sum(counts) / len(counts)
    consistent = sum(1 for c in counts if abs(c - avg) <= 1)
    return consistent / len(counts) > config.column_consistency and avg >= config.min_columns


def section_type(name: str) -> str:
    lowered = name.lower()
    if any(k in lowered for k in ("crew", "staff", "team", "production")):
        return "crew"
    if any(k in lowered for k in ("talent", "cast", "model", "actor", "presenter", "voice")):
        return "talent"
    if any(k in lowered for k in ("client", "agency")):
        return "client"
    return "general"


def detect_sections(lines: list[str], library: PatternLibrary) -> tuple[Section, ...]:
    sections: list[Section] = []
    for index, line in enumerate(lines):
        if library.is_section_header(line):
            name = line.strip().strip("=-*#•").strip().rstrip(":").strip()
            sections.append(Section(name=name, type=section_type(name), start_line=index))
    return tuple(sections)


def _is_bare_contact_line(line: str, library: PatternLibrary) -> bool:
    text = line.strip()
    email = library.extract_email(text)
    phone = library.find_phones(text)
    if not email and not phone:
        return False
    leftover = text
    for m in library.find_emails(text) + phone:
        leftover = leftover.replace(text[m.start:m.end], " ")
    return len(leftover.split()) <= 2


def detect_multiline(lines: list[str], library: PatternLibrary) -> bool:
    run = 0
    for line in lines:
        if line.strip() and _is_bare_contact_line(line, library):
            run += 1
            if run >= 2:
                return True
        else:
            run = 0
    return False


def analyze_structure(
    text: str,
    library: PatternLibrary | None = None,
    config: StructureConfig | None = None,
) -> DocumentStructure:
    """Classify layout, delimiter and sections of *text*."""
    library = library or get_pattern_library()
    config = config or StructureConfig()
    lines = text.splitlines()

    tabular = detect_columns(lines, config)
    multiline = detect_multiline(lines, library)
    sections = detect_sections(lines, library)

    if tabular:
        layout = Layout.TABULAR
    elif multiline:
        layout = Layout.MULTILINE
    elif sections:
        layout = Layout.SECTIONED
    else:
        layout = Layout.MIXED

    structure = DocumentStructure(
        layout=layout,
        delimiter=detect_delimiter(text),
        sections=sections,
        has_table_like_columns=tabular,
        has_multiline_stanzas=multiline,
        has_email_signals=bool(library.find_emails(text)),
        has_phone_signals=bool(library.find_phones(text)),
        line_count=len(lines),
    )
    logger.debug(
        "Structure: layout=%s delimiter=%r sections=%d lines=%d",
        layout.value, structure.delimiter, len(sections), len(lines),
    )
    return structure
