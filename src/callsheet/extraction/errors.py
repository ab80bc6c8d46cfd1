"""Exception taxonomy for the extraction engine.

Document-level failures (garbage input, no decoder) abort a call. Everything
raised on the model-assisted path is scoped to a single chunk and is caught
by the extractor that owns the chunk loop.
"""

from __future__ import annotations

from callsheet.shared.llm.errors import ModelServiceError, RateLimitError

__all__ = [
    "ExtractionError",
    "GarbageInputError",
    "NoDecoderAvailable",
    "OptionalDecoderUnavailable",
    "ModelServiceError",
    "RateLimitError",
    "MalformedModelResponse",
    "RetryExhausted",
]


class ExtractionError(Exception):
    """Base class for all engine errors."""


class GarbageInputError(ExtractionError):
    """Input text is undecoded binary or raw PDF structure."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Input looks like undecoded binary data: {reason}")
        self.reason = reason


class NoDecoderAvailable(ExtractionError):
    """No registered decoder could turn the payload into text."""


class OptionalDecoderUnavailable(ExtractionError):
    """An optional decoder (e.g. OCR) is not installed or configured."""


class MalformedModelResponse(ExtractionError):
    """Model output could not be parsed as a JSON contact array."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw[:500]


class RetryExhausted(ExtractionError):
    """A retried operation ran out of attempts."""

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
