import pytest

from hexagono.infra.retry import retry_on, retryable


class Flaky:
    def __init__(self, failures, exc=ConnectionError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc(f"fail {self.calls}")
        return "ok"


def test_succeeds_after_transient_failures():
    sleeps = []
    fn = Flaky(2)

    assert retry_on(fn, attempts=3, base=1, sleep=sleeps.append) == "ok"
    assert fn.calls == 3
    assert len(sleeps) == 2
    # backoff exponencial con hasta 25% de jitter
    assert 1 <= sleeps[0] <= 1.25
    assert 2 <= sleeps[1] <= 2.5


def test_raises_last_error_when_exhausted():
    fn = Flaky(5)
    with pytest.raises(ConnectionError, match="fail 3"):
        retry_on(fn, attempts=3, sleep=lambda _: None)
    assert fn.calls == 3


def test_non_retryable_error_is_raised_immediately():
    fn = Flaky(1, exc=ValueError)
    with pytest.raises(ValueError):
        retry_on(
            fn,
            attempts=5,
            is_retryable=lambda e: isinstance(e, ConnectionError),
            sleep=lambda _: None,
        )
    assert fn.calls == 1


def test_delay_is_capped():
    sleeps = []
    retry_on(Flaky(4), attempts=5, base=1, cap=3, sleep=sleeps.append)
    assert max(sleeps) <= 3 * 1.25


def test_on_retry_callback():
    seen = []
    retry_on(
        Flaky(1),
        attempts=2,
        base=0,
        on_retry=lambda attempt, e, delay: seen.append((attempt, str(e))),
        sleep=lambda _: None,
    )
    assert seen == [(1, "fail 1")]


def test_decorator():
    fn = Flaky(1)

    @retryable(attempts=2, base=0)
    def call():
        return fn()

    assert call() == "ok"
    assert fn.calls == 2
