"""
Session Service for Interview Assessments

This module owns the lifecycle of one assessment attempt:
Created -> InProgress -> Completed. Sessions persist in the key-value store
so any component holding the store can read them back; completion is
decided here when the last expected answer is recorded.
"""

import datetime
from typing import Any, Callable, Dict, Iterable, Optional

from interviewiq.common.logger import app_logger
from interviewiq.common.locks import KeyedLock
from interviewiq.common.serialization import parse_timestamp, utc_now
from interviewiq.common.error_handling import (
    DuplicateAnswerError,
    NoQuestionsAvailableError,
    SessionCompletedError,
    SessionNotFoundError,
    ValidationError,
)
from interviewiq.assessments.base.models import Answer, Session
from interviewiq.assessments.base.events import (
    AnswerRecordedEvent,
    EventDispatcher,
    SessionCompletedEvent,
    SessionCreatedEvent,
)
from interviewiq.storage.base import KeyValueStore

logger = app_logger.getChild("assessments.interview.session_service")

SESSION_KEY_PREFIX = "session:"

# Record keys accepted by update(); everything else is owned by the state machine
PATCHABLE_FIELDS = ("endTime", "userName", "userEmail", "metadata")


class SessionService:
    """
    Service for managing interview assessment sessions.

    Args:
        store: Key-value store holding the session records
        event_dispatcher: Dispatcher receiving lifecycle events
        clock: Returns the current time, injectable for tests
    """

    def __init__(
        self,
        store: KeyValueStore,
        event_dispatcher: Optional[EventDispatcher] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None
    ):
        self.store = store
        self.event_dispatcher = event_dispatcher or EventDispatcher()
        self._clock = clock or utc_now
        self._locks = KeyedLock()

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    async def _save(self, session: Session) -> None:
        await self.store.put(self._key(session.id), session.to_dict())

    async def create(
        self,
        level: str,
        domain: str,
        question_ids: Iterable[int],
        user_email: Optional[str] = None,
        user_name: Optional[str] = None
    ) -> Session:
        """
        Create a session for an already selected question set.

        Args:
            level: Experience level of the set
            domain: Domain of the set
            question_ids: Selected question IDs in presentation order
            user_email: Email the session will be folded under
            user_name: Display name of the candidate

        Returns:
            The new session in the created state

        Raises:
            NoQuestionsAvailableError: If the question set is empty
        """
        ids = [int(q) for q in question_ids]
        if not ids:
            raise NoQuestionsAvailableError(level, domain)

        session = Session(
            level=level,
            domain=domain,
            question_ids=ids,
            start_time=self._clock(),
            user_email=user_email,
            user_name=user_name,
        )
        await self._save(session)
        logger.info(f"Created session {session.id} ({level}/{domain}, {len(ids)} questions)")

        await self.event_dispatcher.dispatch(
            SessionCreatedEvent(session.id, level, domain, len(ids))
        )
        return session

    async def get(self, session_id: str) -> Session:
        """
        Load a session.

        Raises:
            SessionNotFoundError: If the ID is unknown
        """
        data = await self.store.get(self._key(session_id))
        if data is None:
            raise SessionNotFoundError(session_id)
        return Session.from_dict(data)

    async def add_answer(self, session_id: str, answer: Answer) -> Session:
        """
        Record the answer to the current question.

        The last expected answer completes the session and dispatches
        SessionCompletedEvent.

        Args:
            session_id: Session to update
            answer: Scored answer for the expected question

        Returns:
            The updated session

        Raises:
            SessionNotFoundError: If the ID is unknown
            SessionCompletedError: If the session is already completed
            DuplicateAnswerError: If the answer is not for the expected question
        """
        async with self._locks.hold(session_id):
            session = await self.get(session_id)
            if session.is_completed:
                raise SessionCompletedError(session_id)
            if answer.question_id != session.expected_question_id:
                raise DuplicateAnswerError(
                    answer.question_id,
                    session_id,
                    details={"expected_question_id": session.expected_question_id}
                )

            session.record(answer, self._clock())
            await self._save(session)

        logger.debug(
            f"Session {session_id}: answer {session.current_question_index}/{session.total_questions} "
            f"for question {answer.question_id} ({'correct' if answer.is_correct else 'incorrect'})"
        )

        await self.event_dispatcher.dispatch(
            AnswerRecordedEvent(session_id, answer.question_id, answer.is_correct, answer.points)
        )
        if session.is_completed:
            logger.info(f"Session {session_id} completed with score {session.total_score}")
            await self.event_dispatcher.dispatch(SessionCompletedEvent(session))
        return session

    async def update(self, session_id: str, partial: Dict[str, Any]) -> Session:
        """
        Merge-patch the editable fields of a session.

        Args:
            session_id: Session to update
            partial: Record keys to change (``endTime``, ``userName``,
                ``userEmail``, ``metadata``); ``metadata`` is merged key by key

        Returns:
            The updated session

        Raises:
            SessionNotFoundError: If the ID is unknown
            ValidationError: For keys the state machine owns, or an endTime
                on a session that is not completed
        """
        unknown = sorted(set(partial) - set(PATCHABLE_FIELDS))
        if unknown:
            raise ValidationError(
                f"Session fields cannot be patched: {', '.join(unknown)}",
                details={"fields": unknown}
            )

        async with self._locks.hold(session_id):
            session = await self.get(session_id)

            if "endTime" in partial:
                if not session.is_completed:
                    raise ValidationError(
                        "endTime can only be set on a completed session",
                        details={"session_id": session_id}
                    )
                try:
                    end_time = parse_timestamp(partial["endTime"])
                except (TypeError, ValueError) as e:
                    raise ValidationError("endTime is not a valid timestamp", cause=e)
                if end_time is None:
                    raise ValidationError("endTime cannot be cleared on a completed session")
                session.end_time = end_time
            if "userName" in partial:
                session.user_name = partial["userName"]
            if "userEmail" in partial:
                session.user_email = partial["userEmail"]
            if "metadata" in partial:
                session.metadata.update(partial["metadata"] or {})

            await self._save(session)
        return session

    async def discard(self, session_id: str) -> bool:
        """
        Drop a session (restart). Completed sessions already folded into
        progress are unaffected.

        Returns:
            True if the session existed
        """
        removed = await self.store.delete(self._key(session_id))
        if removed:
            logger.info(f"Discarded session {session_id}")
        return removed

    @staticmethod
    def expected_question_id(session: Session) -> Optional[int]:
        return session.expected_question_id
