"""
Memory Question Bank Module

In-memory question bank plus the loader for the YAML/JSON bank files.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import yaml

from interviewiq.common.error_handling import ValidationError
from .model import Question
from .repository import QuestionBank

logger = logging.getLogger(__name__)

DEFAULT_BANK_PATH = Path(__file__).parent / "data" / "question_bank.yaml"


class MemoryQuestionBank(QuestionBank):
    """
    In-memory implementation of the QuestionBank.

    Questions keep the order they were loaded in.
    """

    def __init__(self, questions: Iterable[Question] = ()):
        """
        Args:
            questions: Questions to serve

        Raises:
            ValidationError: If two questions share an ID
        """
        self._questions: Dict[int, Question] = {}
        for question in questions:
            if question.id in self._questions:
                raise ValidationError(
                    f"Duplicate question ID {question.id}",
                    details={"question_id": question.id}
                )
            self._questions[question.id] = question

    async def get_by_id(self, question_id: int) -> Optional[Question]:
        return self._questions.get(question_id)

    async def find_by_level_and_domain(self, level: str, domain: str) -> List[Question]:
        return [
            q for q in self._questions.values()
            if q.level == level and q.domain == domain
        ]

    async def list_domains(self) -> List[str]:
        return sorted({q.domain for q in self._questions.values()})

    async def list_levels(self) -> List[str]:
        return sorted({q.level for q in self._questions.values()})

    async def count(self) -> int:
        return len(self._questions)


def load_question_bank(path: Optional[Union[str, Path]] = None) -> MemoryQuestionBank:
    """
    Load a question bank file.

    The file holds either a list of question records or a mapping with a
    ``questions`` list. YAML and JSON are both accepted.

    Args:
        path: Bank file, defaults to the bundled bank

    Returns:
        The loaded bank

    Raises:
        ValidationError: If the file is missing or a record is malformed
    """
    bank_path = Path(path) if path else DEFAULT_BANK_PATH
    try:
        with open(bank_path, "r", encoding="utf-8") as f:
            if bank_path.suffix.lower() == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ValidationError(f"Could not load question bank {bank_path}", cause=e)

    records = raw.get("questions", []) if isinstance(raw, dict) else raw
    if not isinstance(records, list):
        raise ValidationError(f"Question bank {bank_path} must contain a list of questions")

    questions = []
    for index, record in enumerate(records):
        try:
            questions.append(Question.from_dict(record))
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(
                f"Malformed question record at position {index}",
                details={"path": str(bank_path), "position": index},
                cause=e
            )

    logger.info(f"Loaded {len(questions)} questions from {bank_path}")
    return MemoryQuestionBank(questions)
