"""
Tests for question timers, clocks and the timer registry.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from interviewiq.assessments.interview.question_timer import QuestionClock, QuestionTimer, TimerRegistry
from interviewiq.common.config import TIMEOUT_ANSWER_TEXT
from interviewiq.common.error_handling import DuplicateAnswerError, ValidationError


@pytest.mark.asyncio
async def test_timeout_submits_sentinel_once_after_limit():
    on_submit = AsyncMock(return_value="recorded")
    timer = QuestionTimer(5, on_submit, time_limit=30)

    results = [await timer.tick() for _ in range(30)]

    assert results[-1] == "recorded"
    assert results[:-1] == [None] * 29
    on_submit.assert_awaited_once()
    submission = on_submit.await_args.args[0]
    assert submission.question_id == 5
    assert submission.text == TIMEOUT_ANSWER_TEXT
    assert submission.time_spent == 30
    assert submission.timed_out
    assert timer.remaining == 0


@pytest.mark.asyncio
async def test_timeout_submits_typed_draft():
    on_submit = AsyncMock()
    timer = QuestionTimer(1, on_submit, time_limit=3)

    timer.update_draft("HyperText Markup")
    for _ in range(3):
        await timer.tick()

    assert on_submit.await_args.args[0].text == "HyperText Markup"


@pytest.mark.asyncio
async def test_blank_draft_submits_sentinel():
    on_submit = AsyncMock()
    timer = QuestionTimer(1, on_submit, time_limit=1)

    timer.update_draft("   ")
    await timer.tick()

    assert on_submit.await_args.args[0].text == TIMEOUT_ANSWER_TEXT


@pytest.mark.asyncio
async def test_ticks_after_submit_are_ignored():
    on_submit = AsyncMock()
    timer = QuestionTimer(1, on_submit, time_limit=30)

    for _ in range(4):
        await timer.tick()
    await timer.submit("POST")
    for _ in range(40):
        await timer.tick()

    on_submit.assert_awaited_once()
    assert on_submit.await_args.args[0].time_spent == 4
    assert not on_submit.await_args.args[0].timed_out
    assert timer.elapsed == 4


@pytest.mark.asyncio
async def test_second_submit_raises():
    timer = QuestionTimer(1, AsyncMock(), time_limit=30)
    await timer.submit("a")

    with pytest.raises(DuplicateAnswerError):
        await timer.submit("a")


@pytest.mark.asyncio
async def test_submit_after_timeout_raises():
    timer = QuestionTimer(1, AsyncMock(), time_limit=1)
    await timer.tick()

    with pytest.raises(DuplicateAnswerError):
        await timer.submit("late")


@pytest.mark.asyncio
async def test_blank_manual_submit_is_rejected():
    on_submit = AsyncMock()
    timer = QuestionTimer(1, on_submit)

    with pytest.raises(ValidationError):
        await timer.submit("  ")

    on_submit.assert_not_awaited()
    assert not timer.stopped


@pytest.mark.asyncio
async def test_cancelled_timer_never_fires():
    on_submit = AsyncMock()
    timer = QuestionTimer(1, on_submit, time_limit=1)

    timer.cancel()
    await timer.tick()

    on_submit.assert_not_awaited()


def test_sync_callback_result_is_returned():
    calls = []
    timer = QuestionTimer(1, calls.append, time_limit=1)

    asyncio.run(timer.tick())

    assert len(calls) == 1


def test_time_limit_must_be_positive():
    with pytest.raises(ValueError):
        QuestionTimer(1, AsyncMock(), time_limit=0)


def test_snapshot():
    timer = QuestionTimer(3, AsyncMock(), time_limit=30)

    assert timer.snapshot() == {
        "questionId": 3,
        "elapsed": 0,
        "remaining": 30,
        "timeLimit": 30,
        "isSubmitted": False,
    }


@pytest.mark.asyncio
async def test_clock_drives_timer_to_timeout():
    on_submit = AsyncMock()
    timer = QuestionTimer(1, on_submit, time_limit=3)
    clock = QuestionClock(timer, interval=0.001)

    clock.start()
    await asyncio.wait_for(clock.wait(), timeout=2)

    on_submit.assert_awaited_once()
    assert on_submit.await_args.args[0].time_spent == 3
    assert not clock.running


@pytest.mark.asyncio
async def test_clock_cancel_stops_ticking():
    on_submit = AsyncMock()
    timer = QuestionTimer(1, on_submit, time_limit=30)
    clock = QuestionClock(timer, interval=0.01)

    clock.start()
    assert clock.running
    await clock.stop()

    assert not clock.running
    assert timer.is_cancelled
    on_submit.assert_not_awaited()


@pytest.mark.asyncio
async def test_registry_present_resets_timer():
    registry = TimerRegistry(time_limit=30, autostart=False)
    first = registry.present("s1", 1, AsyncMock())
    for _ in range(10):
        await first.tick()

    second = registry.present("s1", 2, AsyncMock())

    assert first.is_cancelled
    assert second.elapsed == 0
    assert second.remaining == 30
    assert registry.get("s1") is second
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_registry_cancel_and_shutdown():
    registry = TimerRegistry(time_limit=30, tick_seconds=0.01)
    registry.present("s1", 1, AsyncMock())
    registry.present("s2", 1, AsyncMock())

    assert registry.cancel("s1")
    assert not registry.cancel("s1")

    await registry.shutdown()
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_failed_callback_reopens_question():
    on_submit = AsyncMock(side_effect=[RuntimeError("store down"), "recorded"])
    timer = QuestionTimer(1, on_submit, time_limit=30)

    with pytest.raises(RuntimeError):
        await timer.submit("POST")
    assert not timer.stopped
    assert timer.submission is None

    assert await timer.submit("POST") == "recorded"
    assert timer.is_submitted


@pytest.mark.asyncio
async def test_clock_keeps_retrying_failed_timeout():
    on_submit = AsyncMock(side_effect=[RuntimeError("store down"), "recorded"])
    timer = QuestionTimer(1, on_submit, time_limit=2)
    clock = QuestionClock(timer, interval=0.001)

    clock.start()
    await asyncio.wait_for(clock.wait(), timeout=2)

    assert on_submit.await_count == 2
    assert timer.is_submitted
    assert timer.submission.time_spent == 2
