"""
Interview Question Timer

Each displayed question gets its own QuestionTimer holding two counters
that advance on the same tick: an elapsed stopwatch (the answer's
time_spent) and a countdown that forces a submission when it reaches zero.
A QuestionClock drives one timer from a cancellable asyncio task, and the
TimerRegistry keeps at most one live clock per session, so presenting the
next question always retires the previous countdown.
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from interviewiq.common.config import TIMEOUT_ANSWER_TEXT
from interviewiq.common.logger import app_logger
from interviewiq.common.error_handling import DuplicateAnswerError, ValidationError, log_error

logger = app_logger.getChild("assessments.interview.question_timer")

DEFAULT_TIME_LIMIT = 30


@dataclass(frozen=True)
class TimerSubmission:
    """The answer text a timer hands to its submit callback."""
    question_id: int
    text: str
    time_spent: int
    timed_out: bool


SubmitCallback = Callable[[TimerSubmission], Union[Awaitable[Any], Any]]


class QuestionTimer:
    """
    Stopwatch and countdown for one question instance.

    Args:
        question_id: Question being timed
        on_submit: Called exactly once with the submission (manual or timeout)
        time_limit: Countdown start value in ticks (seconds)
        timeout_answer: Text submitted on timeout when the draft is blank
        session_id: Owning session, used in logs and errors
    """

    def __init__(
        self,
        question_id: int,
        on_submit: SubmitCallback,
        time_limit: int = DEFAULT_TIME_LIMIT,
        timeout_answer: str = TIMEOUT_ANSWER_TEXT,
        session_id: str = ""
    ):
        if time_limit < 1:
            raise ValueError(f"time_limit must be at least 1, got {time_limit}")
        self.question_id = question_id
        self.session_id = session_id
        self.time_limit = time_limit
        self.timeout_answer = timeout_answer
        self._on_submit = on_submit
        self.elapsed = 0
        self.remaining = time_limit
        self.draft = ""
        self.is_submitted = False
        self.is_cancelled = False
        self.submission: Optional[TimerSubmission] = None

    @property
    def stopped(self) -> bool:
        return self.is_submitted or self.is_cancelled

    def update_draft(self, text: str) -> None:
        """Remember the text currently typed for this question."""
        if not self.stopped:
            self.draft = text or ""

    def cancel(self) -> None:
        """Stop the timer without submitting; later ticks are ignored."""
        self.is_cancelled = True

    async def tick(self) -> Any:
        """
        Advance both counters by one second.

        Once the countdown is at zero, each further tick retries the
        forced submission without adding to the elapsed time.

        Returns:
            The submit callback's result when this tick timed the question
            out, otherwise None
        """
        if self.stopped:
            return None

        if self.remaining > 0:
            self.elapsed += 1
            self.remaining -= 1
        if self.remaining == 0:
            text = self.draft if self.draft.strip() else self.timeout_answer
            logger.info(f"Question {self.question_id} timed out after {self.elapsed}s, auto-submitting")
            return await self._fire(text, timed_out=True)
        return None

    async def submit(self, text: str) -> Any:
        """
        Submit an answer manually.

        Returns:
            The submit callback's result

        Raises:
            ValidationError: If the text is blank
            DuplicateAnswerError: If this question was already submitted
        """
        if self.stopped:
            raise DuplicateAnswerError(self.question_id, self.session_id)
        if not text or not text.strip():
            raise ValidationError("Answer text is required", details={"question_id": self.question_id})
        return await self._fire(text, timed_out=False)

    async def _fire(self, text: str, timed_out: bool) -> Any:
        self.is_submitted = True
        self.submission = TimerSubmission(
            question_id=self.question_id,
            text=text,
            time_spent=self.elapsed,
            timed_out=timed_out,
        )
        try:
            result = self._on_submit(self.submission)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            # Nothing was recorded; reopen the question for another submit or tick.
            self.is_submitted = False
            self.submission = None
            raise
        return result

    def snapshot(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "elapsed": self.elapsed,
            "remaining": self.remaining,
            "timeLimit": self.time_limit,
            "isSubmitted": self.is_submitted,
        }


class QuestionClock:
    """
    Ticks one QuestionTimer from an asyncio task until it stops.

    Args:
        timer: Timer to drive
        interval: Seconds between ticks
    """

    def __init__(self, timer: QuestionTimer, interval: float = 1.0):
        self.timer = timer
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the tick task on the running loop."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while not self.timer.stopped:
            await asyncio.sleep(self.interval)
            try:
                await self.timer.tick()
            except Exception as e:
                # Nobody awaits this task; a failed timeout submit is retried next tick.
                log_error(e, context={
                    "session_id": self.timer.session_id,
                    "question_id": self.timer.question_id,
                })

    def cancel(self) -> None:
        """
        Cancel the timer and its task.

        Safe to call from inside the task itself (a timeout callback that
        presents the next question); the loop then exits on its own.
        """
        self.timer.cancel()
        if self.running and self._task is not asyncio.current_task():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait for the task to finish, treating cancellation as finished."""
        if self._task is None or self._task is asyncio.current_task():
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def stop(self) -> None:
        """Cancel the timer and wait for the task to finish."""
        self.cancel()
        await self.wait()


class TimerRegistry:
    """
    The live timer of each session.

    Args:
        time_limit: Countdown length for new timers
        tick_seconds: Clock interval for new timers
        timeout_answer: Sentinel text for blank timeouts
        autostart: Start a QuestionClock for each presented question; with
            False timers only move when ``tick()`` is called directly
    """

    def __init__(
        self,
        time_limit: int = DEFAULT_TIME_LIMIT,
        tick_seconds: float = 1.0,
        timeout_answer: str = TIMEOUT_ANSWER_TEXT,
        autostart: bool = True
    ):
        self.time_limit = time_limit
        self.tick_seconds = tick_seconds
        self.timeout_answer = timeout_answer
        self.autostart = autostart
        self._active: Dict[str, Tuple[QuestionTimer, QuestionClock]] = {}

    def present(self, session_id: str, question_id: int, on_submit: SubmitCallback) -> QuestionTimer:
        """
        Start timing a newly displayed question, retiring the previous one.

        Returns:
            The fresh timer (elapsed 0, full countdown)
        """
        self.cancel(session_id)
        timer = QuestionTimer(
            question_id,
            on_submit,
            time_limit=self.time_limit,
            timeout_answer=self.timeout_answer,
            session_id=session_id,
        )
        clock = QuestionClock(timer, self.tick_seconds)
        self._active[session_id] = (timer, clock)
        if self.autostart:
            clock.start()
        return timer

    def get(self, session_id: str) -> Optional[QuestionTimer]:
        entry = self._active.get(session_id)
        return entry[0] if entry else None

    def cancel(self, session_id: str) -> bool:
        """Cancel the session's live timer. Returns whether one existed."""
        entry = self._active.pop(session_id, None)
        if entry is None:
            return False
        entry[1].cancel()
        return True

    async def shutdown(self) -> None:
        """Cancel every timer and wait for the tick tasks to finish."""
        clocks = [clock for _, clock in self._active.values()]
        self._active.clear()
        for clock in clocks:
            clock.cancel()
        for clock in clocks:
            await clock.wait()

    def __len__(self) -> int:
        return len(self._active)
