"""
Progress Tracker

This module folds completed assessment sessions into per-user progress
records and keeps the login log read by the admin dashboard.

Each fold is a read-modify-write of one user's record in the key-value
store, so it runs under that user's lock; folds for different users run
concurrently.
"""

import uuid
import datetime
from typing import Callable, List, Optional

from interviewiq.common.logger import app_logger, log_execution_time
from interviewiq.common.locks import KeyedLock
from interviewiq.common.numbers import percentage, rounded_mean
from interviewiq.common.serialization import utc_now
from interviewiq.common.error_handling import ValidationError
from interviewiq.assessments.base.models import Session
from interviewiq.progress.models import DashboardSummary, LoginAttempt, UserProgress
from interviewiq.storage.base import KeyValueStore

logger = app_logger.getChild("progress.tracker")

PROGRESS_KEY_PREFIX = "progress:"
PROGRESS_INDEX_KEY = "progress_index"
LOGIN_HISTORY_KEY = "login_history"

_INDEX_LOCK = "__index__"
_LOGIN_LOCK = "__logins__"


def calculate_accuracy(correct_answers: int, total_questions: int) -> int:
    """Rounded accuracy percentage, 0 when there are no questions."""
    return percentage(correct_answers, total_questions)


def recompute_progress(progress: UserProgress) -> UserProgress:
    """
    Recompute every derived field from the session list.

    Args:
        progress: Record to update in place

    Returns:
        The same record
    """
    sessions = progress.sessions
    progress.total_sessions = len(sessions)
    progress.best_score = max((s.total_score for s in sessions), default=0)
    progress.average_score = rounded_mean(s.total_score for s in sessions)
    progress.total_questions = sum(len(s.answers) for s in sessions)
    progress.correct_answers = sum(s.correct_answers for s in sessions)
    progress.accuracy = calculate_accuracy(progress.correct_answers, progress.total_questions)
    return progress


def new_login_id(now: datetime.datetime) -> str:
    return f"login_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


class ProgressAggregator:
    """
    Folds sessions into user progress and records logins.

    Args:
        store: Key-value store for progress records and the login log
        clock: Returns the current time, injectable for tests
    """

    def __init__(self, store: KeyValueStore, clock: Optional[Callable[[], datetime.datetime]] = None):
        self.store = store
        self._clock = clock or utc_now
        self._locks = KeyedLock()

    @staticmethod
    def _key(email: str) -> str:
        return f"{PROGRESS_KEY_PREFIX}{email}"

    async def _load(self, email: str) -> Optional[UserProgress]:
        data = await self.store.get(self._key(email))
        return None if data is None else UserProgress.from_dict(data)

    async def _index_user(self, email: str) -> None:
        async with self._locks.hold(_INDEX_LOCK):
            index = await self.store.get(PROGRESS_INDEX_KEY) or []
            if email not in index:
                index.append(email)
                await self.store.put(PROGRESS_INDEX_KEY, index)

    @log_execution_time(logger)
    async def fold_session(
        self,
        session: Session,
        user_name: str,
        email: str,
        registration_date: Optional[datetime.datetime] = None
    ) -> UserProgress:
        """
        Fold a completed session into the user's progress.

        Folding a session ID that is already part of the record changes
        nothing.

        Args:
            session: Completed session
            user_name: Display name, stored when the record is created
            email: User identity
            registration_date: Registration time for a new record

        Returns:
            The user's progress after the fold

        Raises:
            ValidationError: If the session is not completed or email is empty
        """
        if not email:
            raise ValidationError("An email is required to track progress")
        if not session.is_completed:
            raise ValidationError(
                f"Session {session.id} is not completed",
                details={"session_id": session.id}
            )

        async with self._locks.hold(email):
            progress = await self._load(email)
            now = self._clock()
            if progress is None:
                progress = UserProgress(
                    user_id=email,
                    user_name=user_name,
                    last_login_date=now,
                    registration_date=registration_date or now,
                )
            elif progress.has_session(session.id):
                logger.info(f"Session {session.id} already folded for {email}, skipping")
                return progress

            progress.sessions.append(session)
            recompute_progress(progress)
            progress.last_login_date = now
            await self.store.put(self._key(email), progress.to_dict())

        await self._index_user(email)
        logger.info(
            f"Folded session {session.id} for {email}: {progress.total_sessions} sessions, "
            f"best {progress.best_score}, accuracy {progress.accuracy}%"
        )
        return progress

    async def track_login(
        self,
        email: str,
        user_name: str,
        ip_address: Optional[str] = None,
        success: bool = True
    ) -> LoginAttempt:
        """
        Append a login attempt to the log.

        A successful login also refreshes ``last_login_date`` on the
        user's existing progress record.
        """
        now = self._clock()
        attempt = LoginAttempt(
            id=new_login_id(now),
            email=email,
            user_name=user_name,
            login_time=now,
            success=success,
            ip_address=ip_address,
        )

        async with self._locks.hold(_LOGIN_LOCK):
            history = await self.store.get(LOGIN_HISTORY_KEY) or []
            history.append(attempt.to_dict())
            await self.store.put(LOGIN_HISTORY_KEY, history)

        if success:
            async with self._locks.hold(email):
                progress = await self._load(email)
                if progress is not None:
                    progress.last_login_date = now
                    await self.store.put(self._key(email), progress.to_dict())

        logger.info(f"Tracked {'successful' if success else 'failed'} login for {email}")
        return attempt

    async def get_user_progress(self, email: str) -> Optional[UserProgress]:
        return await self._load(email)

    async def get_all_user_progress(self) -> List[UserProgress]:
        """Every user's progress, in first-fold order."""
        index = await self.store.get(PROGRESS_INDEX_KEY) or []
        result = []
        for email in index:
            progress = await self._load(email)
            if progress is not None:
                result.append(progress)
        return result

    async def get_login_history(self) -> List[LoginAttempt]:
        """Login attempts, most recent first."""
        history = await self.store.get(LOGIN_HISTORY_KEY) or []
        attempts = [LoginAttempt.from_dict(item) for item in reversed(history)]
        attempts.sort(key=lambda attempt: attempt.login_time, reverse=True)
        return attempts

    async def get_dashboard_summary(self) -> DashboardSummary:
        users = await self.get_all_user_progress()
        logins = await self.get_login_history()
        return DashboardSummary(
            total_users=len(users),
            total_sessions=sum(user.total_sessions for user in users),
            average_accuracy=rounded_mean(user.accuracy for user in users),
            total_logins=len(logins),
            successful_logins=sum(1 for attempt in logins if attempt.success),
        )
