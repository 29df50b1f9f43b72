"""
Progress Controller

HTTP routes for user progress, the login log and the admin dashboard.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from interviewiq.api import APIResponse
from interviewiq.common.error_handling import NotFoundError
from interviewiq.common.logger import app_logger
from interviewiq.services import ServiceContainer, get_services

logger = app_logger.getChild("progress.controller")

router = APIRouter()


class LoginRequest(BaseModel):
    """A login attempt reported by the client."""
    email: str = Field(..., min_length=3, description="User email")
    user_name: str = Field(..., min_length=1, description="Display name")
    success: bool = True
    ip_address: Optional[str] = None


@router.get("/users", summary="List every user's progress")
async def list_users(services: ServiceContainer = Depends(get_services)):
    users = await services.progress.get_all_user_progress()
    return APIResponse.success([user.to_dict() for user in users])


@router.get("/users/{email}", summary="Get one user's progress")
async def get_user(email: str, services: ServiceContainer = Depends(get_services)):
    progress = await services.progress.get_user_progress(email)
    if progress is None:
        raise NotFoundError(f"No progress recorded for {email}", details={"email": email})
    return APIResponse.success(progress.to_dict())


@router.get("/logins", summary="List login attempts, most recent first")
async def list_logins(services: ServiceContainer = Depends(get_services)):
    attempts = await services.progress.get_login_history()
    return APIResponse.success([attempt.to_dict() for attempt in attempts])


@router.post("/logins", status_code=status.HTTP_201_CREATED, summary="Record a login attempt")
async def track_login(request: Request, login: LoginRequest, services: ServiceContainer = Depends(get_services)):
    """
    Append the attempt to the login log and, for a successful login,
    notify the admin by email when notifications are configured.
    """
    ip_address = login.ip_address or (request.client.host if request.client else None)
    attempt = await services.progress.track_login(
        login.email, login.user_name, ip_address=ip_address, success=login.success
    )

    notified = False
    if attempt.success:
        notified = await services.notifier.send_login_notification(
            attempt.user_name, attempt.email, attempt.login_time, attempt.ip_address
        )
    return APIResponse.success({"login": attempt.to_dict(), "notified": notified}, message="Login tracked")


@router.get("/summary", summary="Dashboard totals")
async def get_summary(services: ServiceContainer = Depends(get_services)):
    summary = await services.progress.get_dashboard_summary()
    return APIResponse.success(summary.to_dict())
