"""The five heuristic extraction strategies.

Each strategy is a pure function ``(text, structure, context) -> candidates``.
They share nothing but the read-only pattern library, so they can run in any
order or in parallel.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable

from ..types import ContactCandidate, DocumentStructure, Strategy
from .linker import DEFAULT_PROXIMITY_WINDOW, attach_to_nearest_name, collect_observations
from .patterns import Fields, PatternLibrary, get_pattern_library, normalize_name
from .structure import split_columns

logger = logging.getLogger(__name__)

MULTI_LINE_CONFIDENCE = 0.7
TABULAR_CONFIDENCE = 0.85

# Header cell keyword -> field; checked in order so "Company Name" maps to company.
_HEADER_FIELDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("email", ("email", "e-mail", "mail")),
    ("phone", ("phone", "tel", "telephone", "mobile", "cell")),
    ("role", ("role", "position", "title", "job")),
    ("company", ("company", "agency", "vendor")),
    ("department", ("department", "dept")),
    ("name", ("name", "contact")),
)


@dataclass(frozen=True)
class StrategyContext:
    library: PatternLibrary = field(default_factory=get_pattern_library)
    proximity_window: int = DEFAULT_PROXIMITY_WINDOW


StrategyFn = Callable[[str, DocumentStructure, StrategyContext], list[ContactCandidate]]


def _candidate(
    fields: Fields,
    confidence: float,
    strategy: Strategy,
    line: str | None = None,
    line_number: int | None = None,
    section: str | None = None,
    section_type: str | None = None,
) -> ContactCandidate:
    return ContactCandidate(
        name=fields.get("name") or None,
        email=fields.get("email") or None,
        phone=fields.get("phone") or None,
        role=fields.get("role") or None,
        company=fields.get("company") or None,
        department=fields.get("department") or None,
        confidence=confidence,
        origin=strategy.value,
        source_line=line,
        line_number=line_number,
        section=section,
        section_type=section_type,
    )


def _worth_keeping(fields: Fields) -> bool:
    """Generic extraction needs a contact channel, or a name with a role."""
    return bool(fields.get("email") or fields.get("phone") or (fields.get("name") and fields.get("role")))


def _is_noise(line: str, library: PatternLibrary) -> bool:
    return (
        library.should_skip(line)
        or library.is_section_header(line)
        or library.is_header_row(split_columns(line))
    )


def extract_line_by_line(
    text: str, structure: DocumentStructure, ctx: StrategyContext
) -> list[ContactCandidate]:
    lib = ctx.library
    candidates: list[ContactCandidate] = []
    for number, raw in enumerate(text.splitlines()):
        line = raw.strip()
        if not line or _is_noise(line, lib):
            continue

        matched = lib.match_contact_line(line)
        if matched:
            rule, fields = matched
            confidence = rule.base_confidence
        else:
            fields, confidence = lib.extract_fields(line)
            if not _worth_keeping(fields):
                continue

        candidate = _candidate(fields, confidence, Strategy.LINE_BY_LINE, line, number)
        if candidate.is_valid():
            candidates.append(candidate)
    return candidates


def extract_multi_line(
    text: str, structure: DocumentStructure, ctx: StrategyContext
) -> list[ContactCandidate]:
    """Stanza extraction: one contact per block of consecutive lines."""
    lib = ctx.library
    candidates: list[ContactCandidate] = []
    block: Fields = {}
    block_lines: list[str] = []
    block_start: int | None = None

    def flush() -> None:
        nonlocal block, block_lines, block_start
        if block and _worth_keeping(block):
            candidate = _candidate(
                block, MULTI_LINE_CONFIDENCE, Strategy.MULTI_LINE,
                " / ".join(block_lines), block_start,
            )
            if candidate.is_valid():
                candidates.append(candidate)
        block, block_lines, block_start = {}, [], None

    for number, raw in enumerate(text.splitlines()):
        line = raw.strip()
        if not line or lib.should_skip(line) or lib.is_section_header(line):
            flush()
            continue

        email = lib.extract_email(line)
        phone = lib.extract_phone(line)
        role_line = lib.is_role_line(line)
        name = None if role_line else lib.extract_name(line)

        if role_line and block.get("role"):
            flush()
        elif name and block.get("name") and (block.get("email") or block.get("phone") or block.get("role")):
            flush()

        if block_start is None:
            block_start = number
        block_lines.append(line)

        if email and not block.get("email"):
            block["email"] = email
        if phone and not block.get("phone"):
            block["phone"] = phone
        if name and not block.get("name"):
            block["name"] = name
        if not block.get("role") and not (email or phone):
            role = lib.infer_role(line)
            if role:
                block["role"] = role
        if not block.get("company"):
            company = lib.extract_company(line)
            if company:
                block["company"] = company
    flush()
    return candidates


def _split_row(line: str, delimiter: str) -> list[str]:
    if delimiter in ("|", "\t", "•"):
        cells = [c.strip() for c in line.split(delimiter)]
        cells = [c for c in cells if c]
        if len(cells) >= 2:
            return cells
    return split_columns(line)


def _map_headers(cells: list[str]) -> dict[int, str]:
    mapping: dict[int, str] = {}
    for index, cell in enumerate(cells):
        words = set(re.findall(r"[a-z-]+", cell.lower()))
        for field_name, keywords in _HEADER_FIELDS:
            if words & set(keywords) and field_name not in mapping.values():
                mapping[index] = field_name
                break
    return mapping


def _row_from_headers(cells: list[str], mapping: dict[int, str], lib: PatternLibrary) -> Fields:
    fields: Fields = {}
    for index, cell in enumerate(cells):
        field_name = mapping.get(index)
        if field_name is None or not cell:
            continue
        if field_name == "email":
            fields["email"] = lib.extract_email(cell)
        elif field_name == "phone":
            fields["phone"] = lib.extract_phone(cell)
        elif field_name == "name":
            fields["name"] = normalize_name(cell) if lib.looks_like_name(cell) else None
        elif field_name == "role":
            fields["role"] = lib.role_from_label(cell)
        else:
            fields[field_name] = " ".join(cell.split())
    return fields


def extract_tabular(
    text: str, structure: DocumentStructure, ctx: StrategyContext
) -> list[ContactCandidate]:
    lib = ctx.library
    rows = [
        (number, raw.strip(), _split_row(raw.strip(), structure.delimiter))
        for number, raw in enumerate(text.splitlines())
        if raw.strip()
    ]
    first = next((row for row in rows if len(row[2]) >= 2), None)
    header_line: int | None = None
    mapping: dict[int, str] = {}
    if first is not None and lib.is_header_row(first[2]):
        header_line = first[0]
        mapping = _map_headers(first[2])
        logger.debug("Tabular header on line %d: %s", header_line, mapping)

    candidates: list[ContactCandidate] = []
    for number, line, cells in rows:
        if number == header_line or len(cells) < 2:
            continue
        if lib.should_skip(line) or lib.is_section_header(line):
            continue
        fields = _row_from_headers(cells, mapping, lib) if mapping else lib.sniff_cells(cells)
        candidate = _candidate(fields, TABULAR_CONFIDENCE, Strategy.TABULAR, line, number)
        if candidate.is_valid():
            candidates.append(candidate)
    return candidates


def extract_sectioned(
    text: str, structure: DocumentStructure, ctx: StrategyContext
) -> list[ContactCandidate]:
    lib = ctx.library
    lines = text.splitlines()
    sections = structure.sections
    candidates: list[ContactCandidate] = []
    for index, section in enumerate(sections):
        end = sections[index + 1].start_line if index + 1 < len(sections) else len(lines)
        for number in range(section.start_line + 1, end):
            line = lines[number].strip()
            if not line or _is_noise(line, lib):
                continue
            fields, confidence = lib.extract_fields(line)
            if not _worth_keeping(fields):
                continue
            candidate = _candidate(
                fields, confidence, Strategy.SECTIONED, line, number,
                section=section.name, section_type=section.type,
            )
            if candidate.is_valid():
                candidates.append(candidate)
    return candidates


def extract_freeform(
    text: str, structure: DocumentStructure, ctx: StrategyContext
) -> list[ContactCandidate]:
    observations = collect_observations(text, ctx.library)
    return attach_to_nearest_name(observations, ctx.proximity_window)


STRATEGY_FUNCTIONS: dict[Strategy, StrategyFn] = {
    Strategy.LINE_BY_LINE: extract_line_by_line,
    Strategy.MULTI_LINE: extract_multi_line,
    Strategy.TABULAR: extract_tabular,
    Strategy.SECTIONED: extract_sectioned,
    Strategy.FREEFORM: extract_freeform,
}


def run_strategies(
    text: str,
    structure: DocumentStructure,
    strategies: list[Strategy] | tuple[Strategy, ...],
    ctx: StrategyContext | None = None,
) -> dict[Strategy, list[ContactCandidate]]:
    """Run each strategy against the full text; results are kept per strategy."""
    ctx = ctx or StrategyContext()
    results: dict[Strategy, list[ContactCandidate]] = {}
    for strategy in strategies:
        found = STRATEGY_FUNCTIONS[strategy](text, structure, ctx)
        logger.debug("Strategy %s produced %d candidates", strategy.value, len(found))
        results[strategy] = found
    return results
