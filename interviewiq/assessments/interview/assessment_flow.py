"""
Interview Assessment Flow

Coordinates one candidate's attempt: select questions, open a session,
present each question with a fresh timer, evaluate every submission (manual
or timed out) through the same path, and fold the completed session into
the user's progress.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from interviewiq.common.logger import app_logger
from interviewiq.common.error_handling import (
    InterviewIQError,
    QuestionNotFoundError,
    SessionCompletedError,
    log_error,
)
from interviewiq.assessments.base.events import SessionCompletedEvent
from interviewiq.assessments.base.models import Answer, Session
from interviewiq.assessments.interview.answer_evaluation import AnswerEvaluator
from interviewiq.assessments.interview.question_selection import DEFAULT_QUESTION_COUNT, QuestionSelector
from interviewiq.assessments.interview.question_timer import QuestionTimer, TimerRegistry, TimerSubmission
from interviewiq.assessments.interview.report import DEFAULT_PASS_THRESHOLD, SessionReport, build_session_report
from interviewiq.assessments.interview.session_service import SessionService
from interviewiq.domain.questions import Question, QuestionBank
from interviewiq.progress.tracker import ProgressAggregator

logger = app_logger.getChild("assessments.interview.assessment_flow")


@dataclass
class SubmissionResult:
    """Outcome of one recorded answer."""
    session: Session
    answer: Answer
    next_question: Optional[Question] = None
    report: Optional[SessionReport] = None

    @property
    def completed(self) -> bool:
        return self.session.is_completed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answer": self.answer.to_dict(),
            "session": self.session.to_dict(),
            "completed": self.completed,
            "nextQuestion": self.next_question.to_public_dict() if self.next_question else None,
            "report": self.report.to_dict() if self.report else None,
        }


class AssessmentFlow:
    """
    Orchestrates selection, sessions, timers, evaluation and progress.

    Args:
        bank: Question bank
        selector: Question selector over the same bank
        evaluator: Answer evaluator
        sessions: Session state machine
        progress: Progress aggregator receiving completed sessions
        timers: Timer registry; None disables question timers
        question_count: Questions per session
        pass_threshold: Percentage needed to pass in reports
    """

    def __init__(
        self,
        bank: QuestionBank,
        selector: QuestionSelector,
        evaluator: AnswerEvaluator,
        sessions: SessionService,
        progress: ProgressAggregator,
        timers: Optional[TimerRegistry] = None,
        question_count: int = DEFAULT_QUESTION_COUNT,
        pass_threshold: int = DEFAULT_PASS_THRESHOLD
    ):
        self.bank = bank
        self.selector = selector
        self.evaluator = evaluator
        self.sessions = sessions
        self.progress = progress
        self.timers = timers
        self.question_count = question_count
        self.pass_threshold = pass_threshold
        self.sessions.event_dispatcher.subscribe(SessionCompletedEvent, self._on_session_completed)

    async def _question(self, question_id: int) -> Question:
        question = await self.bank.get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundError(question_id)
        return question

    async def _questions(self, session: Session) -> List[Question]:
        return [await self._question(qid) for qid in session.question_ids]

    async def start(self, level: str, domain: str, email: Optional[str] = None,
                    user_name: Optional[str] = None) -> Tuple[Session, Question]:
        """
        Start an assessment.

        Returns:
            The new session and its first question

        Raises:
            NoQuestionsAvailableError: If the level/domain pool is empty
        """
        questions = await self.selector.select(level, domain, self.question_count)
        session = await self.sessions.create(
            level,
            domain,
            [q.id for q in questions],
            user_email=email,
            user_name=user_name,
        )
        self._present(session.id, questions[0].id)
        return session, questions[0]

    def _present(self, session_id: str, question_id: int) -> Optional[QuestionTimer]:
        if self.timers is None:
            return None

        async def on_submit(submission: TimerSubmission) -> SubmissionResult:
            return await self._record(session_id, submission)

        return self.timers.present(session_id, question_id, on_submit)

    async def current_question(self, session_id: str) -> Optional[Question]:
        """The question awaiting an answer, None once the session is completed."""
        session = await self.sessions.get(session_id)
        if session.expected_question_id is None:
            return None
        return await self._question(session.expected_question_id)

    def timer_state(self, session_id: str) -> Optional[Dict[str, Any]]:
        timer = self.timers.get(session_id) if self.timers else None
        return timer.snapshot() if timer else None

    async def update_draft(self, session_id: str, text: str) -> None:
        """Remember typed text so a timeout submits it instead of the sentinel."""
        session = await self.sessions.get(session_id)
        if session.is_completed:
            raise SessionCompletedError(session_id)
        timer = self.timers.get(session_id) if self.timers else None
        if timer is not None:
            timer.update_draft(text)

    async def submit_answer(self, session_id: str, text: str, time_spent: Optional[int] = None) -> SubmissionResult:
        """
        Submit the answer to the current question.

        With a live timer the submission goes through it and the timer's
        elapsed seconds become ``time_spent``; otherwise the caller's value
        (default 0) is used.

        Raises:
            SessionNotFoundError: If the session is unknown
            SessionCompletedError: If the session is already completed
            DuplicateAnswerError: If the question was already answered
            ValidationError: If a timed question gets a blank answer
        """
        session = await self.sessions.get(session_id)
        if session.is_completed:
            raise SessionCompletedError(session_id)

        timer = self.timers.get(session_id) if self.timers else None
        if timer is not None and timer.question_id == session.expected_question_id:
            return await timer.submit(text)

        submission = TimerSubmission(
            question_id=session.expected_question_id,
            text=text,
            time_spent=time_spent or 0,
            timed_out=False,
        )
        return await self._record(session_id, submission)

    async def _record(self, session_id: str, submission: TimerSubmission) -> SubmissionResult:
        question = await self._question(submission.question_id)
        answer = self.evaluator.build_answer(question, submission.text, submission.time_spent)
        session = await self.sessions.add_answer(session_id, answer)

        if session.is_completed:
            if self.timers is not None:
                self.timers.cancel(session_id)
            report = build_session_report(session, await self._questions(session), self.pass_threshold)
            return SubmissionResult(session=session, answer=answer, report=report)

        next_question = await self._question(session.expected_question_id)
        self._present(session_id, next_question.id)
        return SubmissionResult(session=session, answer=answer, next_question=next_question)

    async def _on_session_completed(self, event: SessionCompletedEvent) -> None:
        session = event.session
        if not session.user_email:
            logger.info(f"Session {session.id} has no user email, not tracking progress")
            return
        try:
            await self.progress.fold_session(session, session.user_name or session.user_email, session.user_email)
        except InterviewIQError as e:
            # The answer is already recorded; a failed fold must not undo it.
            log_error(e, context={"session_id": session.id, "email": session.user_email})

    async def report(self, session_id: str) -> SessionReport:
        session = await self.sessions.get(session_id)
        return build_session_report(session, await self._questions(session), self.pass_threshold)

    async def restart(self, session_id: str) -> bool:
        """Drop the attempt and its timer. Returns whether the session existed."""
        if self.timers is not None:
            self.timers.cancel(session_id)
        return await self.sessions.discard(session_id)
