"""
Service container.

Builds every InterviewIQ component from one AppConfig and one store, and
hands them to the API through ``app.state`` instead of module-level
singletons.
"""

import random
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from interviewiq.common.config import AppConfig
from interviewiq.assessments.base.events import EventDispatcher
from interviewiq.assessments.interview.answer_evaluation import AnswerEvaluator
from interviewiq.assessments.interview.assessment_flow import AssessmentFlow
from interviewiq.assessments.interview.question_selection import QuestionSelector
from interviewiq.assessments.interview.question_timer import TimerRegistry
from interviewiq.assessments.interview.session_service import SessionService
from interviewiq.domain.questions import QuestionBank, load_question_bank
from interviewiq.integrations.chat_history import ChatHistoryRepository
from interviewiq.integrations.llm import GeminiClient
from interviewiq.integrations.notifications import EmailNotifier
from interviewiq.progress.tracker import ProgressAggregator
from interviewiq.storage.base import KeyValueStore
from interviewiq.storage.factory import create_store

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Every long-lived component of the service."""
    config: AppConfig
    store: KeyValueStore
    bank: QuestionBank
    sessions: SessionService
    progress: ProgressAggregator
    timers: Optional[TimerRegistry]
    flow: AssessmentFlow
    llm: GeminiClient
    notifier: EmailNotifier
    chat_history: ChatHistoryRepository

    async def close(self) -> None:
        if self.timers is not None:
            await self.timers.shutdown()
        await self.llm.close()
        await self.store.close()


def build_services(
    config: AppConfig,
    store: Optional[KeyValueStore] = None,
    bank: Optional[QuestionBank] = None,
    rng: Optional[random.Random] = None
) -> ServiceContainer:
    """
    Wire the components together.

    Args:
        config: Application configuration
        store: Store to use instead of the configured backend
        bank: Question bank to use instead of loading the configured file
        rng: Random source for question selection

    Returns:
        The container
    """
    store = store or create_store(config.storage)
    bank = bank or load_question_bank(config.assessment.question_bank_path)
    assessment = config.assessment

    sessions = SessionService(store, EventDispatcher())
    progress = ProgressAggregator(store)
    timers = None
    if assessment.enable_question_timer:
        timers = TimerRegistry(
            time_limit=assessment.question_time_limit,
            tick_seconds=assessment.timer_tick_seconds,
            timeout_answer=assessment.timeout_answer_text,
        )

    flow = AssessmentFlow(
        bank=bank,
        selector=QuestionSelector(bank, rng),
        evaluator=AnswerEvaluator(assessment.answer_match_policy, assessment.keyword_match_threshold),
        sessions=sessions,
        progress=progress,
        timers=timers,
        question_count=assessment.question_count,
        pass_threshold=assessment.pass_threshold,
    )

    logger.info(
        f"Services ready: store={store.name}, policy={assessment.answer_match_policy}, "
        f"timers={'on' if timers else 'off'}"
    )
    return ServiceContainer(
        config=config,
        store=store,
        bank=bank,
        sessions=sessions,
        progress=progress,
        timers=timers,
        flow=flow,
        llm=GeminiClient(config.ai),
        notifier=EmailNotifier(config.notifications),
        chat_history=ChatHistoryRepository(store),
    )


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the app's container."""
    return request.app.state.services
