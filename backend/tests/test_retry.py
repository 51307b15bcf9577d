"""Tests for the retry executor."""

import pytest

from pdfvault.core.config import settings
from pdfvault.exceptions import RemoteFatalError, RemoteNodeNotFoundError, RemoteTransientError
from pdfvault.remote.retry import SINGLE_ATTEMPT, RetryPolicy, is_transient, with_retry


class Flaky:
    """Callable failing with the queued errors, then returning *result*."""

    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestWithRetry:

    def test_first_attempt_success_never_sleeps(self):
        sleeps = []
        op = Flaky([])
        assert with_retry(op, RetryPolicy(3, 1.0), sleep=sleeps.append) == "ok"
        assert op.calls == 1
        assert sleeps == []

    def test_transient_failures_then_success(self):
        sleeps = []
        op = Flaky([RemoteTransientError("busy"), RemoteTransientError("busy")], result=42)
        assert with_retry(op, RetryPolicy(5, 2.0), sleep=sleeps.append) == 42
        assert op.calls == 3
        assert sleeps == [2.0, 2.0]

    def test_always_transient_exhausts_attempts(self):
        sleeps = []
        last = RemoteTransientError("still busy")
        op = Flaky([RemoteTransientError("busy")] * 4 + [last])
        with pytest.raises(RemoteTransientError) as exc_info:
            with_retry(op, RetryPolicy(5, 0.1), sleep=sleeps.append)
        assert exc_info.value is last
        assert op.calls == 5
        assert len(sleeps) == 4

    def test_non_retryable_error_propagates_immediately(self):
        sleeps = []
        error = RemoteFatalError("bad request", status=400)
        op = Flaky([error])
        with pytest.raises(RemoteFatalError) as exc_info:
            with_retry(op, RetryPolicy(5, 1.0), sleep=sleeps.append)
        assert exc_info.value is error
        assert op.calls == 1
        assert sleeps == []

    def test_not_found_is_not_retried(self):
        op = Flaky([RemoteNodeNotFoundError("n1")])
        with pytest.raises(RemoteNodeNotFoundError):
            with_retry(op, RetryPolicy(5, 0.0), sleep=lambda s: None)
        assert op.calls == 1

    def test_backoff_multiplies_delay(self):
        sleeps = []
        op = Flaky([RemoteTransientError("x")] * 3)
        with_retry(op, RetryPolicy(4, 1.0, backoff=2.0), sleep=sleeps.append)
        assert sleeps == [1.0, 2.0, 4.0]

    def test_retry_after_hint_lengthens_delay(self):
        sleeps = []
        op = Flaky([RemoteTransientError("throttled", retry_after=4.0)])
        with_retry(op, RetryPolicy(3, 1.0, max_delay=10.0), sleep=sleeps.append)
        assert sleeps == [4.0]

    def test_retry_after_hint_capped_by_max_delay(self):
        sleeps = []
        op = Flaky([RemoteTransientError("throttled", retry_after=120.0)])
        with_retry(op, RetryPolicy(3, 1.0, max_delay=10.0), sleep=sleeps.append)
        assert sleeps == [10.0]

    def test_shorter_retry_after_keeps_policy_delay(self):
        sleeps = []
        op = Flaky([RemoteTransientError("throttled", retry_after=0.5)])
        with_retry(op, RetryPolicy(3, 2.0), sleep=sleeps.append)
        assert sleeps == [2.0]

    def test_custom_classifier(self):
        op = Flaky([KeyError("flaky"), KeyError("flaky")])
        result = with_retry(
            op,
            RetryPolicy(3, 0.0),
            classify=lambda e: isinstance(e, KeyError),
            sleep=lambda s: None,
        )
        assert result == "ok"
        assert op.calls == 3

    def test_single_attempt_policy(self):
        op = Flaky([RemoteTransientError("busy")])
        with pytest.raises(RemoteTransientError):
            with_retry(op, SINGLE_ATTEMPT, sleep=lambda s: pytest.fail("must not sleep"))
        assert op.calls == 1


class TestRetryPolicy:

    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 5
        assert policy.base_delay == 5.0
        assert policy.delay_for(1) == policy.delay_for(4) == 5.0

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_delay(self):
        with pytest.raises(ValueError):
            RetryPolicy(base_delay=-1)

    def test_from_settings(self):
        policy = RetryPolicy.from_settings(settings)
        assert policy.max_attempts == settings.remote_retry_attempts
        assert policy.base_delay == 0.0

    def test_is_transient(self):
        assert is_transient(RemoteTransientError("x"))
        assert not is_transient(RemoteFatalError("x"))
        assert not is_transient(ValueError("x"))
