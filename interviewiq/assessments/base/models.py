"""
Base Assessment Models

This module defines the answer and session records of an interview
assessment and the invariants tying them together.
"""

import uuid
import enum
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from interviewiq.common.serialization import format_timestamp, parse_timestamp, utc_now


class SessionStatus(enum.Enum):
    """Status of an assessment session."""
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Answer:
    """
    One scored response to one question.

    Attributes:
        question_id: ID of the answered question
        user_answer: Text the candidate submitted
        is_correct: Whether the evaluator accepted it
        points: Points awarded (0 or the question's points)
        time_spent: Seconds the question was on screen
    """
    question_id: int
    user_answer: str
    is_correct: bool
    points: int
    time_spent: int

    def __post_init__(self):
        if self.time_spent < 0:
            raise ValueError(f"time_spent must be >= 0, got {self.time_spent}")
        if self.points < 0:
            raise ValueError(f"points must be >= 0, got {self.points}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "userAnswer": self.user_answer,
            "isCorrect": self.is_correct,
            "points": self.points,
            "timeSpent": self.time_spent,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Answer':
        return cls(
            question_id=int(data["questionId"]),
            user_answer=str(data.get("userAnswer", "")),
            is_correct=bool(data["isCorrect"]),
            points=int(data["points"]),
            time_spent=int(data.get("timeSpent", 0)),
        )


@dataclass
class Session:
    """
    One assessment attempt.

    The session owns its target question count (``len(question_ids)``), so
    completion is decided here rather than by callers.
    """
    level: str
    domain: str
    question_ids: List[int]
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    answers: List[Answer] = field(default_factory=list)
    current_question_index: int = 0
    total_score: int = 0
    start_time: datetime.datetime = field(default_factory=utc_now)
    end_time: Optional[datetime.datetime] = None
    status: SessionStatus = SessionStatus.CREATED
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_questions(self) -> int:
        return len(self.question_ids)

    @property
    def correct_answers(self) -> int:
        return sum(1 for answer in self.answers if answer.is_correct)

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def expected_question_id(self) -> Optional[int]:
        """ID of the next question to answer, None once all are answered."""
        if self.current_question_index >= self.total_questions:
            return None
        return self.question_ids[self.current_question_index]

    def record(self, answer: Answer, now: datetime.datetime) -> None:
        """
        Append an answer and advance, completing on the last question.

        Callers validate the answer against ``expected_question_id`` first.
        """
        self.answers.append(answer)
        self.current_question_index += 1
        self.total_score += answer.points
        if self.current_question_index == self.total_questions:
            self.end_time = now
            self.status = SessionStatus.COMPLETED
        else:
            self.status = SessionStatus.IN_PROGRESS

    def check_invariants(self) -> None:
        """Raise AssertionError if the bookkeeping fields disagree."""
        assert self.current_question_index == len(self.answers)
        assert self.total_score == sum(answer.points for answer in self.answers)
        assert (self.end_time is not None) == (self.current_question_index == self.total_questions)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "level": self.level,
            "domain": self.domain,
            "answers": [answer.to_dict() for answer in self.answers],
            "currentQuestionIndex": self.current_question_index,
            "totalScore": self.total_score,
            "startTime": format_timestamp(self.start_time),
            "questionIds": list(self.question_ids),
            "status": self.status.value,
            "userEmail": self.user_email,
            "userName": self.user_name,
            "metadata": dict(self.metadata),
        }
        if self.end_time is not None:
            data["endTime"] = format_timestamp(self.end_time)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        answers = [Answer.from_dict(a) for a in data.get("answers", [])]
        question_ids = data.get("questionIds")
        if question_ids is None:
            # Records written without the selected set only know what was answered.
            question_ids = [answer.question_id for answer in answers]
        end_time = parse_timestamp(data.get("endTime"))
        status = data.get("status")
        if status is None:
            if end_time is not None:
                status = SessionStatus.COMPLETED.value
            else:
                status = SessionStatus.IN_PROGRESS.value if answers else SessionStatus.CREATED.value
        return cls(
            id=data["id"],
            level=data["level"],
            domain=data["domain"],
            question_ids=[int(q) for q in question_ids],
            answers=answers,
            current_question_index=int(data.get("currentQuestionIndex", len(answers))),
            total_score=int(data.get("totalScore", sum(a.points for a in answers))),
            start_time=parse_timestamp(data.get("startTime")) or utc_now(),
            end_time=end_time,
            status=SessionStatus(status),
            user_email=data.get("userEmail"),
            user_name=data.get("userName"),
            metadata=dict(data.get("metadata") or {}),
        )
