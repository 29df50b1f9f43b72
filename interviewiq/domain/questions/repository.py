"""
Question Bank Module

This module defines the read-only interface the assessment uses to query
questions.
"""

import abc
from typing import List, Optional

from .model import Question


class QuestionBank(abc.ABC):
    """
    Abstract base class for question banks.

    A bank is loaded once and never mutated by the assessment.
    """

    @abc.abstractmethod
    async def get_by_id(self, question_id: int) -> Optional[Question]:
        """
        Get a question by its ID.

        Args:
            question_id: The ID of the question to retrieve

        Returns:
            The question if found, None otherwise
        """
        pass

    @abc.abstractmethod
    async def find_by_level_and_domain(self, level: str, domain: str) -> List[Question]:
        """
        Find questions matching a level and a domain exactly.

        Args:
            level: Experience level value
            domain: Domain name (case-sensitive)

        Returns:
            Matching questions in bank order
        """
        pass

    @abc.abstractmethod
    async def list_domains(self) -> List[str]:
        """Distinct domains, sorted."""
        pass

    @abc.abstractmethod
    async def list_levels(self) -> List[str]:
        """Distinct levels, sorted."""
        pass

    @abc.abstractmethod
    async def count(self) -> int:
        """Total number of questions."""
        pass
