"""Retry policy for calls to the hosted model.

Rate limits wait for the service's own hint (the retry-after seconds, a
"try again in Ns" phrase in the error text, or a default). Other transient
failures back off exponentially with jitter. ``sleep`` and ``rand`` are
injectable so tests can drive the policy with a fake clock.
"""

from __future__ import annotations

import logging
import random
import re
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from ..errors import ModelServiceError, RateLimitError, RetryExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRY_AGAIN = re.compile(
    r"(?:try again|retry)\s+(?:in|after)\s+(\d+(?:\.\d+)?)\s*(ms|milliseconds?|s|secs?|seconds?|m|mins?|minutes?)?\b",
    re.IGNORECASE,
)


def parse_retry_hint(error: RateLimitError) -> float | None:
    """Seconds to wait according to the error, or None when it gives no hint."""
    if error.retry_after is not None and error.retry_after >= 0:
        return float(error.retry_after)
    match = _TRY_AGAIN.search(str(error))
    if not match:
        return None
    value = float(match.group(1))
    unit = (match.group(2) or "s").lower()
    if unit.startswith("ms") or unit.startswith("milli"):
        return value / 1000.0
    if unit.startswith("m"):
        return value * 60.0
    return value


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 4
    base_delay: float = 1.0
    max_delay: float = 120.0
    multiplier: float = 2.0
    jitter: float = 0.1
    default_rate_limit_delay: float = 20.0
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)
    rand: Callable[[], float] = field(default=random.random, compare=False, repr=False)

    def _with_jitter(self, delay: float) -> float:
        return delay + delay * self.jitter * self.rand()

    def rate_limit_delay(self, error: RateLimitError) -> float:
        hint = parse_retry_hint(error)
        delay = self.default_rate_limit_delay if hint is None else hint
        return min(self._with_jitter(delay), self.max_delay)

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the *attempt*-th failure (0-based)."""
        delay = min(self.base_delay * (self.multiplier ** attempt), self.max_delay)
        return min(self._with_jitter(delay), self.max_delay)

    def run(self, operation: Callable[[], T], label: str = "call") -> T:
        """Call *operation* until it succeeds or attempts run out.

        Raises:
            RetryExhausted: Every attempt failed with a retryable error.
            ModelServiceError: A non-retryable service error (re-raised as is).
        """
        attempts = max(1, self.max_attempts)
        last_error: Exception | None = None
        for attempt in range(attempts):
            try:
                return operation()
            except RateLimitError as e:
                last_error = e
                delay = self.rate_limit_delay(e)
                reason = "rate limited"
            except ModelServiceError as e:
                if not e.retryable:
                    raise
                last_error = e
                delay = self.backoff_delay(attempt)
                reason = "transient error"

            if attempt + 1 >= attempts:
                break
            logger.info(
                "[retry] %s %s | attempt=%d/%d | wait=%.1fs",
                label, reason, attempt + 1, attempts, delay,
            )
            self.sleep(delay)

        logger.warning("[retry] %s gave up after %d attempts: %s", label, attempts, last_error)
        raise RetryExhausted(attempts, last_error)  # type: ignore[arg-type]
