"""Errors raised by model providers."""

from __future__ import annotations


class ModelServiceError(Exception):
    """The model service failed for a reason other than rate limiting."""

    def __init__(self, message: str, *, retryable: bool = False, status_code: int | None = None) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class RateLimitError(ModelServiceError):
    """The model service returned a 429-style rate-limit signal."""

    def __init__(self, message: str = "rate limited", retry_after: float | None = None) -> None:
        super().__init__(message, retryable=True, status_code=429)
        self.retry_after = retry_after
