"""
Progress Models

Per-user rollups of completed sessions and the login log.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from interviewiq.common.serialization import format_timestamp, parse_timestamp, utc_now
from interviewiq.assessments.base.models import Session


@dataclass
class UserProgress:
    """
    Aggregate of one user's completed sessions, keyed by email.

    The score and count fields are derived from ``sessions``; only
    ``recompute_progress`` writes them.
    """
    user_id: str
    user_name: str
    sessions: List[Session] = field(default_factory=list)
    total_sessions: int = 0
    best_score: int = 0
    average_score: int = 0
    total_questions: int = 0
    correct_answers: int = 0
    accuracy: int = 0
    last_login_date: datetime.datetime = field(default_factory=utc_now)
    registration_date: datetime.datetime = field(default_factory=utc_now)

    @property
    def email(self) -> str:
        return self.user_id

    def has_session(self, session_id: str) -> bool:
        return any(s.id == session_id for s in self.sessions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "sessions": [s.to_dict() for s in self.sessions],
            "totalSessions": self.total_sessions,
            "bestScore": self.best_score,
            "averageScore": self.average_score,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "accuracy": self.accuracy,
            "lastLoginDate": format_timestamp(self.last_login_date),
            "registrationDate": format_timestamp(self.registration_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProgress':
        return cls(
            user_id=data["userId"],
            user_name=data.get("userName", ""),
            sessions=[Session.from_dict(s) for s in data.get("sessions", [])],
            total_sessions=int(data.get("totalSessions", 0)),
            best_score=int(data.get("bestScore", 0)),
            average_score=int(data.get("averageScore", 0)),
            total_questions=int(data.get("totalQuestions", 0)),
            correct_answers=int(data.get("correctAnswers", 0)),
            accuracy=int(data.get("accuracy", 0)),
            last_login_date=parse_timestamp(data.get("lastLoginDate")) or utc_now(),
            registration_date=parse_timestamp(data.get("registrationDate")) or utc_now(),
        )


@dataclass(frozen=True)
class LoginAttempt:
    """One entry of the append-only login log."""
    id: str
    email: str
    user_name: str
    login_time: datetime.datetime
    success: bool
    ip_address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "email": self.email,
            "userName": self.user_name,
            "loginTime": format_timestamp(self.login_time),
            "success": self.success,
        }
        if self.ip_address is not None:
            data["ipAddress"] = self.ip_address
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoginAttempt':
        return cls(
            id=data["id"],
            email=data["email"],
            user_name=data.get("userName", ""),
            login_time=parse_timestamp(data["loginTime"]),
            success=bool(data.get("success", False)),
            ip_address=data.get("ipAddress"),
        )


@dataclass(frozen=True)
class DashboardSummary:
    """Headline numbers for the admin view."""
    total_users: int
    total_sessions: int
    average_accuracy: int
    total_logins: int
    successful_logins: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalUsers": self.total_users,
            "totalSessions": self.total_sessions,
            "averageAccuracy": self.average_accuracy,
            "totalLogins": self.total_logins,
            "successfulLogins": self.successful_logins,
        }
