"""
Shared fixtures for the InterviewIQ test suite.
"""

import random
import datetime

import pytest

from interviewiq.assessments.base.events import EventDispatcher
from interviewiq.assessments.interview.answer_evaluation import AnswerEvaluator
from interviewiq.assessments.interview.assessment_flow import AssessmentFlow
from interviewiq.assessments.interview.question_selection import QuestionSelector
from interviewiq.assessments.interview.session_service import SessionService
from interviewiq.domain.questions import MemoryQuestionBank, Question
from interviewiq.progress.tracker import ProgressAggregator
from interviewiq.storage.memory import MemoryStore


class FakeClock:
    """Clock that moves only when told to."""

    def __init__(self, start: datetime.datetime = datetime.datetime(2024, 1, 15, 10, 0, tzinfo=datetime.timezone.utc)):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += datetime.timedelta(seconds=seconds)

    def __call__(self) -> datetime.datetime:
        return self.now


WEB_FRESHER = [
    Question(1, "Web Development", "fresher", "What does HTML stand for?", "HyperText Markup Language"),
    Question(2, "Web Development", "fresher", "What does CSS stand for?", "Cascading Style Sheets"),
    Question(3, "Web Development", "fresher", "Which HTML tag creates a hyperlink?", "a"),
    Question(4, "Web Development", "fresher", "Which HTTP method submits form data?", "POST"),
    Question(5, "Web Development", "fresher", "What HTTP status code means Not Found?", "404"),
]

DATA_EXPERIENCED = [
    Question(31, "Data Science", "experienced", "Which metric is the harmonic mean of precision and recall?", "F1 score"),
    Question(32, "Data Science", "experienced", "What regularization adds the L1 penalty?", "Lasso"),
]


@pytest.fixture
def questions():
    return list(WEB_FRESHER)


@pytest.fixture
def bank():
    return MemoryQuestionBank(WEB_FRESHER + DATA_EXPERIENCED)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_service(store, clock):
    return SessionService(store, EventDispatcher(), clock=clock)


@pytest.fixture
def progress(store, clock):
    return ProgressAggregator(store, clock=clock)


@pytest.fixture
def flow(bank, session_service, progress):
    """Assessment flow without timers and with a seeded selector."""
    return AssessmentFlow(
        bank=bank,
        selector=QuestionSelector(bank, random.Random(7)),
        evaluator=AnswerEvaluator(),
        sessions=session_service,
        progress=progress,
        timers=None,
    )
