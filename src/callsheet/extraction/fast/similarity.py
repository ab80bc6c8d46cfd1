"""Candidate similarity for the fuzzy deduplication pass."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

from ..types import ContactCandidate
from .patterns import phone_digits

# Pairs scoring strictly above this are treated as the same person.
FUZZY_MERGE_THRESHOLD = 0.8


def name_key(name: str) -> str:
    return " ".join(name.lower().split())


def name_similarity(a: str, b: str) -> float:
    """Normalized edit-distance similarity in [0, 1]."""
    left, right = name_key(a), name_key(b)
    if not left or not right:
        return 0.0
    return Levenshtein.normalized_similarity(left, right)


def candidate_similarity(a: ContactCandidate, b: ContactCandidate) -> float:
    """Mean similarity over the fields both candidates carry.

    Names compare by edit distance, emails exactly, phones by digits. Two
    candidates with no field in common score 0.
    """
    scores: list[float] = []
    if a.name and b.name:
        scores.append(name_similarity(a.name, b.name))
    if a.email and b.email:
        scores.append(1.0 if a.email.lower() == b.email.lower() else 0.0)
    if a.phone and b.phone:
        scores.append(1.0 if phone_digits(a.phone) == phone_digits(b.phone) else 0.0)
    if not scores:
        return 0.0
    return sum(scores) / len(scores)
