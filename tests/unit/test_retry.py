"""Tests for the model-call retry policy."""
import pytest

from callsheet.extraction.errors import ModelServiceError, RateLimitError, RetryExhausted
from callsheet.extraction.slow.retry import RetryPolicy, parse_retry_hint


class Script:
    """Callable that raises the scripted errors, then returns ``result``."""

    def __init__(self, *errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestParseRetryHint:
    def test_retry_after_value(self):
        assert parse_retry_hint(RateLimitError(retry_after=3)) == 3.0

    @pytest.mark.parametrize("message,seconds", [
        ("Rate limit reached. Please try again in 500ms.", 0.5),
        ("Please try again in 12s", 12.0),
        ("retry after 2 seconds", 2.0),
        ("try again in 1.5 minutes", 90.0),
        ("try again in 7", 7.0),
    ])
    def test_message_hint(self, message, seconds):
        assert parse_retry_hint(RateLimitError(message)) == pytest.approx(seconds)

    def test_no_hint(self):
        assert parse_retry_hint(RateLimitError("slow down")) is None


class TestRun:
    def test_success_needs_no_sleep(self, instant_policy, sleeps):
        assert instant_policy.run(Script()) == "ok"
        assert sleeps == []

    def test_rate_limit_waits_for_hint(self, instant_policy, sleeps):
        op = Script(RateLimitError(retry_after=3))
        assert instant_policy.run(op) == "ok"
        assert sleeps == [3.0]
        assert op.calls == 2

    def test_rate_limit_without_hint_uses_default(self, instant_policy, sleeps):
        instant_policy.run(Script(RateLimitError("slow down")))
        assert sleeps == [20.0]

    def test_rate_limit_delay_is_capped(self, instant_policy, sleeps):
        instant_policy.run(Script(RateLimitError(retry_after=500)))
        assert sleeps == [120.0]

    def test_transient_errors_back_off_then_give_up(self, instant_policy, sleeps):
        error = ModelServiceError("503", retryable=True, status_code=503)
        op = Script(*[error] * 4)
        with pytest.raises(RetryExhausted) as exc_info:
            instant_policy.run(op, label="chunk 1/1")
        assert sleeps == [1.0, 2.0, 4.0]
        assert exc_info.value.attempts == 4
        assert exc_info.value.last_error is error
        assert op.calls == 4

    def test_non_retryable_error_is_raised_at_once(self, instant_policy, sleeps):
        op = Script(ModelServiceError("400 bad request", status_code=400))
        with pytest.raises(ModelServiceError) as exc_info:
            instant_policy.run(op)
        assert exc_info.value.status_code == 400
        assert op.calls == 1
        assert sleeps == []

    def test_jitter_is_proportional(self, sleeps):
        policy = RetryPolicy(sleep=sleeps.append, rand=lambda: 1.0)
        policy.run(Script(ModelServiceError("502", retryable=True)))
        assert sleeps == [pytest.approx(1.1)]

    def test_single_attempt(self, sleeps):
        policy = RetryPolicy(max_attempts=1, sleep=sleeps.append, rand=lambda: 0.0)
        with pytest.raises(RetryExhausted):
            policy.run(Script(RateLimitError(retry_after=1)))
        assert sleeps == []
