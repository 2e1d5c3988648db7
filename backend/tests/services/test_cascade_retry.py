"""CascadeRetrier — resume policy, backoff bounds, and error propagation."""

import pytest

from classroom.core.errors import NotFoundError, PartialCascadeFailureError
from classroom.services.cascade_retry import CascadeRetrier


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(
        "classroom.services.cascade_retry.asyncio.sleep", fake_sleep,
    )
    return delays


def _failure(resume=None):
    return PartialCascadeFailureError(
        "deleteStudent", "students.delete", "courses.studentIds", resume=resume,
    )


async def test_success_passes_through(no_sleep):
    async def op(x, y=0):
        return x + y

    assert await CascadeRetrier().run(op, 1, y=2) == 3
    assert no_sleep == []


async def test_other_errors_propagate_without_retry(no_sleep):
    calls = []

    async def op():
        calls.append(1)
        raise NotFoundError("Student", "abc")

    with pytest.raises(NotFoundError):
        await CascadeRetrier().run(op)
    assert calls == [1]
    assert no_sleep == []


async def test_resume_called_instead_of_operation():
    op_calls, resume_calls = [], []

    async def resume():
        resume_calls.append(1)
        return True

    async def op():
        op_calls.append(1)
        raise _failure(resume)

    assert await CascadeRetrier().run(op) is True
    assert op_calls == [1]
    assert resume_calls == [1]


async def test_gives_up_after_max_retries(no_sleep):
    attempts = []

    async def resume():
        attempts.append(1)
        raise _failure(resume)

    async def op():
        raise _failure(resume)

    with pytest.raises(PartialCascadeFailureError):
        await CascadeRetrier(max_retries=3).run(op)
    assert len(attempts) == 3
    assert len(no_sleep) == 3


async def test_no_resume_reraises_immediately(no_sleep):
    async def op():
        raise _failure()

    with pytest.raises(PartialCascadeFailureError):
        await CascadeRetrier().run(op)
    assert no_sleep == []


def test_backoff_bounds():
    retrier = CascadeRetrier(base_delay_ms=100, max_delay_ms=1_000)
    for attempt, base in [(0, 100), (1, 200), (2, 400), (5, 1_000)]:
        delay = retrier._backoff(attempt)
        assert int(base * 0.75) <= delay <= int(base * 1.25)
