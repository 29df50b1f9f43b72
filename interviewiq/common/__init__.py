"""
Common utilities shared by InterviewIQ components.
"""

from interviewiq.common.logger import app_logger
from interviewiq.common.config import AppConfig, get_config

__all__ = ["app_logger", "AppConfig", "get_config"]
