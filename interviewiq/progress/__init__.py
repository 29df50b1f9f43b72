"""
User progress rollups and login tracking.
"""

from interviewiq.progress.models import DashboardSummary, LoginAttempt, UserProgress
from interviewiq.progress.tracker import ProgressAggregator, calculate_accuracy, recompute_progress

__all__ = [
    "DashboardSummary",
    "LoginAttempt",
    "UserProgress",
    "ProgressAggregator",
    "calculate_accuracy",
    "recompute_progress",
]
