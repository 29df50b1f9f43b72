"""
Interview Session Report

Turns a session into the result screen: percentage, eligibility bucket,
performance message, timing, and a per-question review.
"""

import enum
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from interviewiq.common.numbers import percentage, round_half_up
from interviewiq.common.serialization import utc_now
from interviewiq.assessments.base.models import Session
from interviewiq.domain.questions import DEFAULT_QUESTION_POINTS, Question

DEFAULT_PASS_THRESHOLD = 60


class EligibilityStatus(enum.Enum):
    """Eligibility bucket derived from a session's accuracy."""
    HIGHLY_ELIGIBLE = "Highly Eligible"
    ELIGIBLE = "Eligible"
    PARTIALLY_ELIGIBLE = "Partially Eligible"
    NOT_ELIGIBLE = "Not Eligible"

    @classmethod
    def from_percentage(cls, value: float) -> 'EligibilityStatus':
        """
        Bucket an accuracy percentage.

        Args:
            value: Accuracy between 0 and 100

        Returns:
            >=80 highly eligible, >=60 eligible, >=40 partially eligible,
            otherwise not eligible
        """
        if value >= 80:
            return cls.HIGHLY_ELIGIBLE
        elif value >= 60:
            return cls.ELIGIBLE
        elif value >= 40:
            return cls.PARTIALLY_ELIGIBLE
        return cls.NOT_ELIGIBLE

    @property
    def message(self) -> str:
        return _ELIGIBILITY_MESSAGES[self]


_ELIGIBILITY_MESSAGES = {
    EligibilityStatus.HIGHLY_ELIGIBLE: (
        "Outstanding! You've demonstrated exceptional knowledge and are highly qualified for this role."
    ),
    EligibilityStatus.ELIGIBLE: (
        "Well done! You've shown good understanding and meet the requirements for this role."
    ),
    EligibilityStatus.PARTIALLY_ELIGIBLE: (
        "You have potential but may need additional preparation. "
        "Consider reviewing the topics and trying again."
    ),
    EligibilityStatus.NOT_ELIGIBLE: (
        "More preparation is needed. We recommend studying the core concepts and retaking the assessment."
    ),
}


def performance_message(value: float) -> str:
    """Headline shown above the score."""
    if value >= 90:
        return "Outstanding Performance!"
    if value >= 75:
        return "Great Job!"
    if value >= 60:
        return "Good Effort!"
    return "Keep Practicing!"


@dataclass
class AnswerReview:
    """One reviewed answer."""
    question_id: int
    question: Optional[str]
    user_answer: str
    correct_answer: Optional[str]
    is_correct: bool
    points: int
    time_spent: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "question": self.question,
            "userAnswer": self.user_answer,
            "correctAnswer": self.correct_answer,
            "isCorrect": self.is_correct,
            "points": self.points,
            "timeSpent": self.time_spent,
        }


@dataclass
class SessionReport:
    """Scored summary of one session."""
    session_id: str
    level: str
    domain: str
    completed: bool
    total_questions: int
    answered_questions: int
    correct_answers: int
    percentage: int
    total_score: int
    max_score: int
    total_time_seconds: int
    average_time_seconds: int
    eligibility: EligibilityStatus
    performance_message: str
    passed: bool
    review: List[AnswerReview] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "level": self.level,
            "domain": self.domain,
            "completed": self.completed,
            "totalQuestions": self.total_questions,
            "answeredQuestions": self.answered_questions,
            "correctAnswers": self.correct_answers,
            "percentage": self.percentage,
            "totalScore": self.total_score,
            "maxScore": self.max_score,
            "totalTimeSeconds": self.total_time_seconds,
            "averageTimeSeconds": self.average_time_seconds,
            "eligibility": self.eligibility.value,
            "eligibilityMessage": self.eligibility.message,
            "performanceMessage": self.performance_message,
            "passed": self.passed,
            "review": [row.to_dict() for row in self.review],
        }


def build_session_report(
    session: Session,
    questions: Iterable[Question] = (),
    pass_threshold: int = DEFAULT_PASS_THRESHOLD,
    now: Optional[datetime.datetime] = None
) -> SessionReport:
    """
    Build the report for a session.

    Args:
        session: Session to summarize
        questions: Questions of the session, used for texts and max score
        pass_threshold: Percentage needed to pass
        now: End of the timing window for sessions still in progress

    Returns:
        The session report
    """
    by_id = {q.id: q for q in questions}
    total = session.total_questions
    correct = session.correct_answers
    score_pct = percentage(correct, total)

    end = session.end_time or now or utc_now()
    total_time = max(round_half_up((end - session.start_time).total_seconds()), 0)

    max_score = sum(by_id[qid].points for qid in session.question_ids if qid in by_id)
    if len(by_id) < total:
        # Without every question, assume the default point value per question.
        max_score = total * DEFAULT_QUESTION_POINTS

    review = [
        AnswerReview(
            question_id=answer.question_id,
            question=by_id[answer.question_id].question if answer.question_id in by_id else None,
            user_answer=answer.user_answer,
            correct_answer=by_id[answer.question_id].correct_answer if answer.question_id in by_id else None,
            is_correct=answer.is_correct,
            points=answer.points,
            time_spent=answer.time_spent,
        )
        for answer in session.answers
    ]

    return SessionReport(
        session_id=session.id,
        level=session.level,
        domain=session.domain,
        completed=session.is_completed,
        total_questions=total,
        answered_questions=len(session.answers),
        correct_answers=correct,
        percentage=score_pct,
        total_score=session.total_score,
        max_score=max_score,
        total_time_seconds=total_time,
        average_time_seconds=round_half_up(total_time / total) if total else 0,
        eligibility=EligibilityStatus.from_percentage(score_pct),
        performance_message=performance_message(score_pct),
        passed=score_pct >= pass_threshold,
        review=review,
    )
