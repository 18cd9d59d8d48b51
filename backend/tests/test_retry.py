import pytest

from backend.errors import NotFound, StoreUnavailable
from backend.utils.retry import retry_on_unavailable


def test_retries_until_store_answers():
    calls, sleeps = [], []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise StoreUnavailable()
        return "ok"

    assert retry_on_unavailable(flaky, attempts=3, initial_delay=0.1, sleep=sleeps.append) == "ok"
    assert sleeps == [0.1, 0.2]


def test_gives_up_after_bounded_attempts():
    calls = []

    def down():
        calls.append(1)
        raise StoreUnavailable()

    with pytest.raises(StoreUnavailable):
        retry_on_unavailable(down, attempts=4, initial_delay=0, sleep=lambda s: None)
    assert len(calls) == 4


def test_expected_outcomes_are_not_retried():
    calls = []

    def missing():
        calls.append(1)
        raise NotFound()

    with pytest.raises(NotFound):
        retry_on_unavailable(missing, attempts=5, sleep=lambda s: None)
    assert len(calls) == 1
