import pytest

from vidbatch.core.retry import backoff_delay, retry_with_backoff
from vidbatch.exceptions import MergeError, MetadataFetchError, TransferError


class FlakyOperation:
    def __init__(self, failures, exc=TransferError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc(f"failure {self.calls}")
        return "ok"


def test_succeeds_after_two_failures():
    op = FlakyOperation(failures=2)
    sleeps = []

    result = retry_with_backoff(op, 3, 100, sleep=sleeps.append, jitter=lambda: 0.0)

    assert result == "ok"
    assert op.calls == 3
    assert sleeps == [100, 200]


def test_always_failing_raises_after_max_attempts():
    op = FlakyOperation(failures=10, exc=MetadataFetchError)
    sleeps = []

    with pytest.raises(MetadataFetchError, match="failure 4"):
        retry_with_backoff(op, 4, 0.5, sleep=sleeps.append, jitter=lambda: 0.0)

    assert op.calls == 4
    assert sleeps == [0.5, 1.0, 2.0]


def test_non_retryable_error_propagates_immediately():
    op = FlakyOperation(failures=1, exc=MergeError)
    sleeps = []

    with pytest.raises(MergeError):
        retry_with_backoff(op, 3, 1, sleep=sleeps.append)

    assert op.calls == 1
    assert sleeps == []


def test_first_success_does_not_sleep():
    sleeps = []
    assert retry_with_backoff(lambda: 42, sleep=sleeps.append) == 42
    assert sleeps == []


def test_jitter_is_added_within_one_second():
    for attempt in (1, 2, 3):
        delay = backoff_delay(attempt, 0.1)
        base = 0.1 * 2 ** (attempt - 1)
        assert base <= delay <= base + 1.0


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        retry_with_backoff(lambda: None, max_attempts=0)
