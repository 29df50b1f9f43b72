"""
Interview Question Selection

Draws the question set for a new session: filter the bank by level and
domain, shuffle uniformly, keep the first ``count``.
"""

import random
from typing import List, Optional, Union

from interviewiq.common.logger import app_logger, log_execution_time
from interviewiq.common.error_handling import NoQuestionsAvailableError
from interviewiq.domain.questions import ExperienceLevel, Question, QuestionBank

logger = app_logger.getChild("assessments.interview.question_selection")

DEFAULT_QUESTION_COUNT = 5


class QuestionSelector:
    """
    Selects a random subset of the questions matching a level and domain.

    Args:
        bank: Question bank to draw from (never mutated)
        rng: Random source, seed it for reproducible draws
    """

    def __init__(self, bank: QuestionBank, rng: Optional[random.Random] = None):
        self._bank = bank
        self._rng = rng or random.Random()

    @log_execution_time(logger)
    async def select(
        self,
        level: Union[str, ExperienceLevel],
        domain: str,
        count: int = DEFAULT_QUESTION_COUNT
    ) -> List[Question]:
        """
        Select questions for a session.

        Args:
            level: Experience level (matched exactly)
            domain: Domain name (matched exactly, case-sensitive)
            count: Number of questions wanted

        Returns:
            ``min(count, pool size)`` distinct questions in random order

        Raises:
            NoQuestionsAvailableError: If no question matches
            ValueError: If count is less than 1
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")

        level_value = level.value if isinstance(level, ExperienceLevel) else level
        pool = list(await self._bank.find_by_level_and_domain(level_value, domain))
        if not pool:
            logger.warning(f"No questions for level={level_value!r} domain={domain!r}")
            raise NoQuestionsAvailableError(level_value, domain)

        self._rng.shuffle(pool)
        selected = pool[:count]
        if len(selected) < count:
            logger.info(
                f"Pool for {level_value}/{domain} has {len(pool)} questions, "
                f"fewer than the {count} requested"
            )
        return selected
