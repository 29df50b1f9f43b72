"""
Error Handling System for InterviewIQ

This module provides the error framework used across the service:
1. A structured exception hierarchy with codes and severities
2. Retry with exponential backoff for flaky outbound calls
3. Structured error logging
4. Error payloads for API responses
"""

import time
import logging
import traceback
import asyncio
import inspect
import random
import functools
import itertools
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union, cast
from datetime import datetime
from pydantic import BaseModel, Field, validator

F = TypeVar('F', bound=Callable)

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for errors"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(Enum):
    """Standard error codes for InterviewIQ"""
    # General errors
    UNKNOWN_ERROR = "unknown_error"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND_ERROR = "not_found_error"

    # Assessment errors
    NO_QUESTIONS_AVAILABLE = "no_questions_available"
    QUESTION_NOT_FOUND = "question_not_found"
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_COMPLETED = "session_completed"
    DUPLICATE_ANSWER = "duplicate_answer"

    # Storage errors
    STORAGE_ERROR = "storage_error"

    # External service errors
    EXTERNAL_SERVICE_ERROR = "external_service_error"
    EXTERNAL_SERVICE_TIMEOUT = "external_service_timeout"


class ErrorInfo(BaseModel):
    """Structured information about an error"""
    code: ErrorCode
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    exception_type: Optional[str] = None
    stack_trace: Optional[List[str]] = None
    context: Optional[Dict[str, Any]] = None

    class Config:
        use_enum_values = True

    @validator('stack_trace', pre=True)
    def validate_stack_trace(cls, v):
        """Split a string stack trace into lines"""
        if isinstance(v, str):
            return v.splitlines()
        return v


class InterviewIQError(Exception):
    """
    Base exception class for all InterviewIQ errors.

    Subclasses set ``code`` and ``severity`` as class attributes; the
    constructor arguments override them for one-off errors.
    """

    code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        severity: Optional[ErrorSeverity] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or type(self).code
        self.severity = severity or type(self).severity
        self.details = dict(details or {})
        self.cause = cause
        self.context = dict(context or {})
        self.timestamp = datetime.now()

    def to_error_info(self, include_stack_trace: bool = False) -> ErrorInfo:
        """Describe the error as an ErrorInfo, folding the cause into details."""
        details = dict(self.details)
        if self.cause is not None:
            details["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}

        return ErrorInfo(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            severity=self.severity,
            details=details,
            exception_type=type(self).__name__,
            stack_trace=traceback.format_exc() if include_stack_trace else None,
            context=self.context
        )

    def to_dict(self, include_stack_trace: bool = False) -> Dict[str, Any]:
        return self.to_error_info(include_stack_trace).dict()

    def __str__(self) -> str:
        text = f"{self.code.value}: {self.message}"
        if self.details:
            text += f" (details: {self.details})"
        if self.cause:
            text += f" caused by {type(self.cause).__name__}: {self.cause}"
        return text


def _with(details: Optional[Dict[str, Any]], **fields: Any) -> Dict[str, Any]:
    merged = dict(details or {})
    merged.update({k: v for k, v in fields.items() if v is not None})
    return merged


class ValidationError(InterviewIQError):
    """Input failed validation"""
    code = ErrorCode.VALIDATION_ERROR
    severity = ErrorSeverity.WARNING


class NotFoundError(InterviewIQError):
    """A requested resource does not exist"""
    code = ErrorCode.NOT_FOUND_ERROR
    severity = ErrorSeverity.WARNING


class AssessmentError(InterviewIQError):
    """Base class for assessment lifecycle errors"""
    severity = ErrorSeverity.WARNING


class NoQuestionsAvailableError(AssessmentError):
    """The bank has no question for a level and domain pair"""
    code = ErrorCode.NO_QUESTIONS_AVAILABLE

    def __init__(self, level: str, domain: str, details: Optional[Dict[str, Any]] = None, **kwargs):
        self.level = level
        self.domain = domain
        super().__init__(
            f"Sorry, no questions available for {level} level in {domain} domain.",
            details=_with(details, level=level, domain=domain),
            **kwargs
        )


class QuestionNotFoundError(AssessmentError):
    code = ErrorCode.QUESTION_NOT_FOUND

    def __init__(self, question_id: Any, details: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(
            f"Question with ID {question_id} not found",
            details=_with(details, question_id=question_id),
            **kwargs
        )


class SessionNotFoundError(AssessmentError):
    code = ErrorCode.SESSION_NOT_FOUND

    def __init__(self, session_id: str, details: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(
            f"Session with ID {session_id} not found",
            details=_with(details, session_id=session_id),
            **kwargs
        )


class SessionCompletedError(AssessmentError):
    """An answer arrived for a session that already has an end time"""
    code = ErrorCode.SESSION_COMPLETED

    def __init__(self, session_id: str, details: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(
            f"Session with ID {session_id} is already completed",
            details=_with(details, session_id=session_id),
            **kwargs
        )


class DuplicateAnswerError(AssessmentError):
    """An answer was submitted twice or for a question that is not current"""
    code = ErrorCode.DUPLICATE_ANSWER

    def __init__(self, question_id: Any, session_id: str, details: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(
            f"Answer for question {question_id} in session {session_id} already submitted or not expected",
            details=_with(details, question_id=question_id, session_id=session_id),
            **kwargs
        )


class StorageError(InterviewIQError):
    """The key-value store could not read or write"""
    code = ErrorCode.STORAGE_ERROR

    def __init__(self, message: str, key: Optional[str] = None, details: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(message, details=_with(details, key=key), **kwargs)


class ExternalServiceError(InterviewIQError):
    """An outbound call (LLM, SMTP) failed"""
    code = ErrorCode.EXTERNAL_SERVICE_ERROR

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None, **kwargs):
        self.service = service
        super().__init__(message, details=_with(details, service=service), **kwargs)


class ExternalServiceTimeoutError(ExternalServiceError):
    code = ErrorCode.EXTERNAL_SERVICE_TIMEOUT

    def __init__(
        self,
        service: str,
        operation: str,
        timeout_seconds: float,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        super().__init__(
            service,
            f"{service} {operation} timed out after {timeout_seconds}s",
            details=_with(details, operation=operation, timeout_seconds=timeout_seconds),
            **kwargs
        )


def convert_exception(
    exception: Exception,
    default_message: str = "An unexpected error occurred",
    default_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
    default_severity: ErrorSeverity = ErrorSeverity.ERROR,
    context: Optional[Dict[str, Any]] = None
) -> InterviewIQError:
    """
    Wrap an arbitrary exception in an InterviewIQError.

    Args:
        exception: The exception to wrap
        default_message: Message used when the exception has none
        default_code: Code given to foreign exceptions
        default_severity: Severity given to foreign exceptions
        context: Extra context merged into the error

    Returns:
        The wrapped error, or ``exception`` itself if it already is one
    """
    if isinstance(exception, InterviewIQError):
        exception.context.update(context or {})
        return exception

    return InterviewIQError(
        str(exception) or default_message,
        code=default_code,
        severity=default_severity,
        cause=exception,
        context=context
    )


def _backoff(max_retries: int, retry_delay: float, backoff_factor: float, jitter: float):
    """Yield the jittered sleep before each retry attempt."""
    delay = retry_delay
    for _ in range(max_retries):
        yield delay * (1 + random.uniform(-jitter, jitter))
        delay *= backoff_factor


def retry(
    max_retries: int = 3,
    retry_delay: float = 1.0,
    backoff_factor: float = 2.0,
    jitter: float = 0.1,
    retry_exceptions: Tuple[Type[Exception], ...] = (Exception,),
    ignore_exceptions: Tuple[Type[Exception], ...] = ()
):
    """
    Retry a sync or async function with exponential backoff.

    Args:
        max_retries: Attempts after the first failure
        retry_delay: Sleep before the first retry, in seconds
        backoff_factor: Multiplier applied to the sleep after every retry
        jitter: Fraction of the sleep randomly added or removed
        retry_exceptions: Exception types that trigger a retry
        ignore_exceptions: Exception types re-raised without retrying

    Returns:
        The decorator
    """
    def decorator(func: F) -> F:
        def announce(attempt: int, pause: float, error: Exception) -> None:
            logger.warning(
                f"{func.__name__} failed with {type(error).__name__}: {error}; "
                f"retry {attempt}/{max_retries} in {pause:.2f}s"
            )

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                pauses = _backoff(max_retries, retry_delay, backoff_factor, jitter)
                for attempt in itertools.count(1):
                    try:
                        return await func(*args, **kwargs)
                    except ignore_exceptions:
                        raise
                    except retry_exceptions as e:
                        pause = next(pauses, None)
                        if pause is None:
                            raise
                        announce(attempt, pause, e)
                        await asyncio.sleep(pause)

            return cast(F, async_wrapper)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            pauses = _backoff(max_retries, retry_delay, backoff_factor, jitter)
            for attempt in itertools.count(1):
                try:
                    return func(*args, **kwargs)
                except ignore_exceptions:
                    raise
                except retry_exceptions as e:
                    pause = next(pauses, None)
                    if pause is None:
                        raise
                    announce(attempt, pause, e)
                    time.sleep(pause)

        return cast(F, sync_wrapper)

    return decorator


def error_response(
    error: Union[InterviewIQError, Exception],
    include_details: bool = True
) -> Dict[str, Any]:
    """
    Build the JSON body returned for a failed request.

    Returns:
        ``{"status": "error", "code", "message"}`` plus ``details`` when
        requested and present
    """
    info = convert_exception(error).to_error_info()
    body: Dict[str, Any] = {"status": "error", "code": info.code, "message": info.message}
    if include_details and info.details:
        body["details"] = info.details
    return body


def log_error(
    error: Union[InterviewIQError, Exception],
    level: int = logging.ERROR,
    include_stack_trace: bool = True,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log an error with its code, context and cause on one line.

    Args:
        error: The error to log
        level: Logging level
        include_stack_trace: Append the traceback being handled
        context: Extra context merged into the error
    """
    error = convert_exception(error, context=context)

    parts = [f"ERROR [{error.code.value}]: {error.message}"]
    if error.context:
        parts.append("(context: " + ", ".join(f"{k}={v}" for k, v in error.context.items()) + ")")
    if error.cause:
        parts.append(f"caused by {type(error.cause).__name__}: {error.cause}")
    message = " ".join(parts)

    if include_stack_trace:
        message += "\n" + traceback.format_exc()
    logger.log(level, message)
