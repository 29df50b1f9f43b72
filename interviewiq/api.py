"""
Shared API utilities for the InterviewIQ service.

This module provides:
- The standard response envelope
- Exception handlers mapping service errors to HTTP responses
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from interviewiq.common.error_handling import ErrorCode, InterviewIQError, error_response, log_error

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.NOT_FOUND_ERROR: status.HTTP_404_NOT_FOUND,
    ErrorCode.NO_QUESTIONS_AVAILABLE: status.HTTP_404_NOT_FOUND,
    ErrorCode.QUESTION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SESSION_COMPLETED: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_ANSWER: status.HTTP_409_CONFLICT,
    ErrorCode.EXTERNAL_SERVICE_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.EXTERNAL_SERVICE_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


class APIResponse:
    """The ``{"status", "message", "data"}`` envelope every route returns."""

    @staticmethod
    def success(data: Any = None, message: str = "Success") -> Dict[str, Any]:
        return {"status": "success", "message": message, "data": data}

    @staticmethod
    def error(message: str, details: Optional[Any] = None,
              code: Optional[str] = None) -> Dict[str, Any]:
        """
        Build an error envelope; ``details`` and ``code`` are omitted when empty.
        """
        body: Dict[str, Any] = {"status": "error", "message": message}
        for key, value in (("details", details), ("code", code)):
            if value:
                body[key] = value
        return body


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors and return a standardized response.
    """
    error_details = [
        {
            "location": list(error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "")
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=APIResponse.error("Validation error", details=error_details, code=ErrorCode.VALIDATION_ERROR.value)
    )


async def service_exception_handler(request: Request, exc: InterviewIQError) -> JSONResponse:
    """
    Render an InterviewIQError with the status code of its error code.
    """
    status_code = ERROR_STATUS_CODES.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    level = logging.ERROR if status_code >= 500 else logging.INFO
    log_error(exc, level=level, include_stack_trace=status_code >= 500, context={"path": request.url.path})
    return JSONResponse(status_code=status_code, content=jsonable_encoder(error_response(exc)))
