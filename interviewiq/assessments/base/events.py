"""
Assessment Domain Events

Events raised by the session state machine and the dispatcher that delivers
them. Handlers may be plain functions or coroutines.
"""

import time
import uuid
import inspect
from typing import Any, Callable, Dict, List, Optional

from interviewiq.common.logger import app_logger

logger = app_logger.getChild("assessments.base.events")


class DomainEvent:
    """Base class for all domain events in the assessment system"""

    def __init__(self, event_id: Optional[str] = None, timestamp: Optional[float] = None):
        self.event_id = event_id or str(uuid.uuid4())
        self.timestamp = timestamp or time.time()
        self.event_type = self.__class__.__name__


class EventDispatcher:
    """Event dispatcher for domain events"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Any], Any]]] = {}

    def subscribe(self, event_type: type, handler: Callable[[Any], Any]) -> None:
        """Subscribe a handler to an event class"""
        self._subscribers.setdefault(event_type.__name__, []).append(handler)

    async def dispatch(self, event: DomainEvent) -> None:
        """Deliver an event to its subscribers in subscription order"""
        handlers = list(self._subscribers.get(event.event_type, []))
        logger.debug(f"Dispatching {event.event_type} {event.event_id} to {len(handlers)} handler(s)")
        for handler in handlers:
            result = handler(event)
            if inspect.isawaitable(result):
                await result


class SessionCreatedEvent(DomainEvent):
    """Event raised when an assessment session is created"""

    def __init__(self, session_id: str, level: str, domain: str, question_count: int,
                 event_id=None, timestamp=None):
        super().__init__(event_id, timestamp)
        self.session_id = session_id
        self.level = level
        self.domain = domain
        self.question_count = question_count


class AnswerRecordedEvent(DomainEvent):
    """Event raised after an answer is appended to a session"""

    def __init__(self, session_id: str, question_id: int, is_correct: bool, points: int,
                 event_id=None, timestamp=None):
        super().__init__(event_id, timestamp)
        self.session_id = session_id
        self.question_id = question_id
        self.is_correct = is_correct
        self.points = points


class SessionCompletedEvent(DomainEvent):
    """Event raised when the last answer of a session is recorded"""

    def __init__(self, session, event_id=None, timestamp=None):
        super().__init__(event_id, timestamp)
        self.session = session
        self.session_id = session.id
        self.score = session.total_score
