"""
Question Domain Model Module

This module defines the question record served by the interview assessment.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_QUESTION_POINTS = 10


class ExperienceLevel(enum.Enum):
    """Experience level a question is written for."""
    FRESHER = "fresher"
    EXPERIENCED = "experienced"


@dataclass(frozen=True)
class Question:
    """
    Represents one interview question.

    Attributes:
        id: Unique identifier within the bank
        domain: Subject area, e.g. "Web Development"
        level: Experience level value ("fresher" or "experienced")
        question: The question text
        correct_answer: Reference answer used for evaluation
        points: Points awarded for a correct answer
    """
    id: int
    domain: str
    level: str
    question: str
    correct_answer: str
    points: int = DEFAULT_QUESTION_POINTS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the exchanged record shape."""
        return {
            "id": self.id,
            "domain": self.domain,
            "level": self.level,
            "question": self.question,
            "correctAnswer": self.correct_answer,
            "points": self.points,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Record shape safe to send to a candidate (no reference answer)."""
        data = self.to_dict()
        del data["correctAnswer"]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Question':
        """
        Create a question from a dictionary.

        Both the camelCase record keys and snake_case keys are accepted.
        """
        return cls(
            id=int(data["id"]),
            domain=str(data["domain"]),
            level=str(data["level"]),
            question=str(data["question"]),
            correct_answer=str(data["correctAnswer"] if "correctAnswer" in data else data["correct_answer"]),
            points=int(data.get("points", DEFAULT_QUESTION_POINTS)),
        )
