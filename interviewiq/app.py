"""
Application factory.

Builds the FastAPI app: configures logging, wires the service container
during the lifespan, registers the exception handlers and mounts the
routers.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from interviewiq import __version__
from interviewiq.api import service_exception_handler, validation_exception_handler
from interviewiq.assessments.interview.controller import router as interview_router
from interviewiq.common.config import AppConfig, get_config
from interviewiq.common.error_handling import InterviewIQError
from interviewiq.common.logger import app_logger, configure_logger
from interviewiq.integrations.controller import router as assistant_router
from interviewiq.progress.controller import router as progress_router
from interviewiq.services import ServiceContainer, build_services

logger = app_logger.getChild("app")


def create_app(config: Optional[AppConfig] = None, services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Configuration; loaded from file and environment when omitted
        services: Prebuilt service container, mainly for tests

    Returns:
        The application
    """
    config = config or (services.config if services is not None else get_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logger(
            level=config.logging.level,
            use_json=config.logging.use_json,
            log_file=config.logging.log_file,
        )
        logger.info(f"Application startup ({config.environment})")
        app.state.services = services or build_services(config)
        try:
            yield
        finally:
            await app.state.services.close()
            logger.info("Application shutdown complete")

    app = FastAPI(
        title="InterviewIQ Assessments API",
        description="Timed interview assessments with scoring and progress tracking",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InterviewIQError, service_exception_handler)

    app.include_router(interview_router, prefix="/api/assessments/interview", tags=["interview"])
    app.include_router(progress_router, prefix="/api/progress", tags=["progress"])
    app.include_router(assistant_router, prefix="/api/assistant", tags=["assistant"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": "Welcome to InterviewIQ Assessments API", "version": __version__}

    return app
