"""Fusion of partial candidates into one record per person.

Key-based merging runs first (phone, then email, then name). A fuzzy pass
then folds together remaining pairs that look like the same person. Inputs
are put into a canonical order up front, so the result does not depend on
the order candidates arrive in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable

from ..types import ContactCandidate
from .patterns import phone_digits
from .similarity import FUZZY_MERGE_THRESHOLD, candidate_similarity

logger = logging.getLogger(__name__)

_MERGED_FIELDS = (
    "name", "email", "phone", "role", "company", "department", "notes",
    "source_line", "line_number", "section", "section_type",
)


@dataclass(frozen=True)
class FusionOutcome:
    contacts: list[ContactCandidate]
    input_count: int
    duplicates_removed: int


def identity_key(candidate: ContactCandidate) -> str | None:
    if candidate.phone:
        digits = phone_digits(candidate.phone)
        if digits:
            return f"phone:{digits}"
    if candidate.email:
        return f"email:{candidate.email.lower()}"
    if candidate.name:
        compact = "".join(candidate.name.lower().split())
        if compact:
            return f"name:{compact}"
    return None


def _origins(candidate: ContactCandidate) -> set[str]:
    return {part.strip() for part in candidate.origin.split(",") if part.strip()}


def merge_candidates(first: ContactCandidate, second: ContactCandidate) -> ContactCandidate:
    """First non-empty value wins per field; confidence is the max."""
    updates = {}
    for name in _MERGED_FIELDS:
        if getattr(first, name) in (None, "") and getattr(second, name) not in (None, ""):
            updates[name] = getattr(second, name)
    return replace(
        first,
        **updates,
        confidence=max(first.confidence, second.confidence),
        origin=", ".join(sorted(_origins(first) | _origins(second))),
    )


def _canonical_order(candidate: ContactCandidate) -> tuple:
    return (
        -candidate.confidence,
        -candidate.field_count(),
        candidate.name or "",
        candidate.email or "",
        candidate.phone or "",
        candidate.role or "",
        candidate.company or "",
        candidate.department or "",
        candidate.origin,
        candidate.line_number if candidate.line_number is not None else -1,
        candidate.section or "",
        candidate.source_line or "",
        candidate.notes or "",
    )


def _fuzzy_pass(contacts: list[ContactCandidate], threshold: float) -> list[ContactCandidate]:
    # Each record absorbs later matches; after a merge only the records after
    # it are rescanned against the merged copy.
    pool = list(contacts)
    i = 0
    while i < len(pool):
        j = i + 1
        while j < len(pool):
            if candidate_similarity(pool[i], pool[j]) > threshold:
                logger.debug("Fuzzy merge: %r + %r", pool[i].name, pool[j].name)
                pool[i] = merge_candidates(pool[i], pool[j])
                del pool[j]
                j = i + 1
            else:
                j += 1
        i += 1
    return pool


def fuse(
    *pools: Iterable[ContactCandidate],
    threshold: float = FUZZY_MERGE_THRESHOLD,
) -> FusionOutcome:
    """Union candidate pools and collapse duplicates.

    This is the single combination point for strategy outputs, the
    multi-pass linker and the model-assisted branch.
    """
    candidates = [c for pool in pools for c in pool if c.is_valid()]
    ordered = sorted(candidates, key=_canonical_order)

    by_key: dict[str, ContactCandidate] = {}
    for candidate in ordered:
        key = identity_key(candidate)
        if key is None:
            continue
        by_key[key] = merge_candidates(by_key[key], candidate) if key in by_key else replace(candidate)

    contacts = _fuzzy_pass(list(by_key.values()), threshold)
    removed = len(candidates) - len(contacts)
    logger.debug("Fusion: %d candidates -> %d contacts", len(candidates), len(contacts))
    return FusionOutcome(contacts=contacts, input_count=len(candidates), duplicates_removed=removed)
