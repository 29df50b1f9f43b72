"""
Application Logger

This module provides the logging setup shared by every InterviewIQ component:
a console/file handler pair, an optional JSON formatter for log shippers,
and a decorator for timing service calls.
"""

import os
import sys
import json
import time
import logging
import datetime
import functools
import inspect
from typing import Any, Optional, Union, Callable, TypeVar

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
APP_LOGGER_NAME = "interviewiq"

F = TypeVar('F', bound=Callable[..., Any])

__all__ = [
    'configure_logger',
    'get_app_logger',
    'JsonFormatter',
    'app_logger',
    'log_execution_time'
]


class JsonFormatter(logging.Formatter):
    """
    Formatter that renders each record as a single JSON object.

    Extra structured fields can be attached with ``extra={"data": {...}}``.
    """

    def __init__(self, datefmt: Optional[str] = None, *, indent: Optional[int] = None):
        super().__init__(datefmt=datefmt)
        self.indent = indent

    def format(self, record: logging.LogRecord) -> str:
        log_object = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "name": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno
        }

        if record.exc_info:
            log_object["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        data = getattr(record, "data", None)
        if isinstance(data, dict):
            log_object.update(data)

        return json.dumps(log_object, indent=self.indent, default=str)


def _build_handlers(formatter: logging.Formatter, log_file: Optional[str], console_output: bool):
    handlers = []
    if console_output:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        directory = os.path.dirname(log_file)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            sys.stderr.write(f"Could not open log file {log_file}: {e}\n")
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logger(
    name: str = APP_LOGGER_NAME,
    level: Union[str, int] = logging.INFO,
    format_string: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    use_json: bool = False,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    (Re)configure a named logger, replacing any handlers it already has.

    Args:
        name: Logger name
        level: Log level name or number
        format_string: Format used by the text formatter
        date_format: Date format used by the text formatter
        use_json: Emit JSON lines instead of text
        log_file: Also append to this file when given
        console_output: Whether to log to stdout

    Returns:
        The configured logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = JsonFormatter() if use_json else logging.Formatter(format_string, date_format)

    configured = logging.getLogger(name)
    configured.setLevel(level)
    configured.handlers = _build_handlers(formatter, log_file, console_output)
    return configured


def get_app_logger() -> logging.Logger:
    """
    Return the application logger, configuring it from the environment
    (LOG_LEVEL, LOG_JSON, LOG_FILE) the first time.
    """
    existing = logging.getLogger(APP_LOGGER_NAME)
    if existing.handlers:
        return existing
    return configure_logger(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        use_json=os.environ.get("LOG_JSON", "false").lower() == "true",
        log_file=os.environ.get("LOG_FILE"),
    )


app_logger = get_app_logger()


def log_execution_time(logger: Optional[logging.Logger] = None) -> Callable[[F], F]:
    """
    Log how long each call of the decorated function (sync or async) took.

    Successful calls log at DEBUG, failures at ERROR before re-raising.
    """
    def decorator(func: F) -> F:
        def report(started: float, error: Optional[Exception] = None) -> None:
            elapsed = time.perf_counter() - started
            target = logger or app_logger
            if error is None:
                target.debug(f"{func.__name__} executed in {elapsed:.3f} seconds")
            else:
                target.error(f"{func.__name__} failed after {elapsed:.3f} seconds: {error}")

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(started, e)
                    raise
                report(started)
                return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(started, e)
                raise
            report(started)
            return result

        return wrapper  # type: ignore
    return decorator
