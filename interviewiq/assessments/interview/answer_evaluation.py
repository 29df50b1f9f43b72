"""
Interview Answer Evaluation

Scores a free-text answer against the question's reference answer. The
matching policy is configurable; the default is case-insensitive equality
after trimming and collapsing whitespace.
"""

import re
import enum
from dataclasses import dataclass
from typing import Optional, Union

from interviewiq.assessments.base.models import Answer
from interviewiq.domain.questions import Question

_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"[a-z0-9]+")

# Words ignored by the keyword policy
STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "by", "for", "in", "is", "it",
    "of", "on", "or", "the", "to", "with",
})


class MatchPolicy(enum.Enum):
    """How a user answer is compared with the reference answer."""
    EXACT = "exact"
    CONTAINS = "contains"
    KEYWORDS = "keywords"


@dataclass(frozen=True)
class EvaluationResult:
    """Correctness and points for one answer."""
    is_correct: bool
    points: int


def normalize_answer(text: Optional[str]) -> str:
    """Lower-case, trim and collapse runs of whitespace."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.strip()).lower()


def _keywords(text: str) -> set:
    return {word for word in _WORD.findall(text) if word not in STOP_WORDS}


class AnswerEvaluator:
    """
    Evaluates answers under a matching policy.

    Args:
        policy: Matching policy, a MatchPolicy or its string value
        keyword_threshold: Share of reference keywords the answer must
            contain under the keyword policy
    """

    def __init__(self, policy: Union[MatchPolicy, str] = MatchPolicy.EXACT, keyword_threshold: float = 0.6):
        self.policy = MatchPolicy(policy)
        if not 0 <= keyword_threshold <= 1:
            raise ValueError(f"keyword_threshold must be within [0, 1], got {keyword_threshold}")
        self.keyword_threshold = keyword_threshold

    def matches(self, user_answer: Optional[str], reference_answer: Optional[str]) -> bool:
        """Whether ``user_answer`` is accepted for ``reference_answer``."""
        answer = normalize_answer(user_answer)
        reference = normalize_answer(reference_answer)
        if not answer or not reference:
            return False

        if self.policy == MatchPolicy.EXACT:
            return answer == reference
        if self.policy == MatchPolicy.CONTAINS:
            return reference in answer

        expected = _keywords(reference)
        if not expected:
            return answer == reference
        found = expected & _keywords(answer)
        return len(found) / len(expected) >= self.keyword_threshold

    def evaluate(self, user_answer: Optional[str], reference_answer: Optional[str], question: Question) -> EvaluationResult:
        """
        Score one answer.

        Never raises for odd input: empty or missing answers score zero.
        """
        is_correct = self.matches(user_answer, reference_answer)
        return EvaluationResult(is_correct=is_correct, points=question.points if is_correct else 0)

    def build_answer(self, question: Question, user_answer: Optional[str], time_spent: int) -> Answer:
        """
        Evaluate against the question's own reference answer.

        Args:
            question: The answered question
            user_answer: Submitted text
            time_spent: Seconds measured by the caller, stored as given

        Returns:
            The immutable scored answer
        """
        result = self.evaluate(user_answer, question.correct_answer, question)
        return Answer(
            question_id=question.id,
            user_answer=user_answer or "",
            is_correct=result.is_correct,
            points=result.points,
            time_spent=time_spent,
        )
