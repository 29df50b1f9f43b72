"""
Interview assessment: question selection, answer evaluation, the session
state machine, question timers, reports and the flow tying them together.
"""

from interviewiq.assessments.interview.question_selection import QuestionSelector
from interviewiq.assessments.interview.answer_evaluation import AnswerEvaluator, EvaluationResult, MatchPolicy
from interviewiq.assessments.interview.session_service import SessionService
from interviewiq.assessments.interview.question_timer import (
    QuestionClock,
    QuestionTimer,
    TimerRegistry,
    TimerSubmission,
)
from interviewiq.assessments.interview.report import EligibilityStatus, SessionReport, build_session_report
from interviewiq.assessments.interview.assessment_flow import AssessmentFlow, SubmissionResult

__all__ = [
    "QuestionSelector",
    "AnswerEvaluator",
    "EvaluationResult",
    "MatchPolicy",
    "SessionService",
    "QuestionClock",
    "QuestionTimer",
    "TimerRegistry",
    "TimerSubmission",
    "EligibilityStatus",
    "SessionReport",
    "build_session_report",
    "AssessmentFlow",
    "SubmissionResult",
]
