"""
Question domain: the question record and the read-only question bank.
"""

from .model import Question, ExperienceLevel, DEFAULT_QUESTION_POINTS
from .repository import QuestionBank
from .memory_repository import MemoryQuestionBank, load_question_bank

__all__ = [
    "Question",
    "ExperienceLevel",
    "DEFAULT_QUESTION_POINTS",
    "QuestionBank",
    "MemoryQuestionBank",
    "load_question_bank",
]
