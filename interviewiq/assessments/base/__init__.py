"""
Base assessment types shared by assessment modules.
"""

from interviewiq.assessments.base.models import Answer, Session, SessionStatus
from interviewiq.assessments.base.events import (
    DomainEvent,
    EventDispatcher,
    SessionCreatedEvent,
    AnswerRecordedEvent,
    SessionCompletedEvent,
)

__all__ = [
    "Answer",
    "Session",
    "SessionStatus",
    "DomainEvent",
    "EventDispatcher",
    "SessionCreatedEvent",
    "AnswerRecordedEvent",
    "SessionCompletedEvent",
]
