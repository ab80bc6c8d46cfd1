"""Confidence scoring and threshold filtering."""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

from ..types import ContactCandidate

ConfidenceLevel = Literal["HIGH", "MEDIUM", "LOW"]

DEFAULT_CONFIDENCE_THRESHOLD = 0.3


def confidence_level(confidence: float) -> ConfidenceLevel:
    if confidence >= 0.8:
        return "HIGH"
    elif confidence >= 0.5:
        return "MEDIUM"
    else:
        return "LOW"


def clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def base_score(candidate: ContactCandidate) -> float:
    """Completeness score: name, full name, email, phone, role."""
    score = 0.0
    name = (candidate.name or "").strip()
    if len(name) > 2:
        score += 0.3
    if " " in name:
        score += 0.1
    if candidate.email:
        score += 0.3
    if candidate.phone:
        score += 0.2
    if candidate.role:
        score += 0.1
    return round(clamp(score), 2)


def score_candidates(candidates: list[ContactCandidate]) -> list[ContactCandidate]:
    """Final confidence is the better of strategy trust and completeness."""
    return [
        replace(c, confidence=round(clamp(max(c.confidence, base_score(c))), 2))
        for c in candidates
    ]


def filter_by_threshold(
    candidates: list[ContactCandidate],
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
) -> list[ContactCandidate]:
    return [c for c in candidates if c.is_valid() and c.confidence >= threshold]


def average_confidence(candidates: list[ContactCandidate]) -> float:
    if not candidates:
        return 0.0
    return round(sum(c.confidence for c in candidates) / len(candidates), 2)
