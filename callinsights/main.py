"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.settings import settings
from .controllers import analysis
from .controllers.dependencies import close_openai_client
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .pipelines.analysis import PipelineBusyError
from .services import CallAnalysisError
from .utils import classify_error
from .views import ErrorResponse

logger = logging.getLogger(__name__)


def _rotating_handler(path_value: str, fmt: str, max_bytes: int) -> RotatingFileHandler:
    log_path = Path(path_value)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _configure_logging() -> None:
    """Route app logs to stdout and file, pipeline/transcript logs to their own files."""

    logging.getLogger().handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(
        _rotating_handler(
            settings.log_file,
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            1_000_000,
        )
    )
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    middleware_logger = logging.getLogger("callinsights.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(logging.INFO)
    middleware_logger.propagate = False

    pipeline_logger = logging.getLogger("callinsights.services.analysis_pipeline")
    pipeline_logger.handlers.clear()
    pipeline_logger.addHandler(
        _rotating_handler(settings.pipeline_log_file, "%(asctime)s | %(levelname)s | %(message)s", 500_000)
    )
    pipeline_logger.setLevel(logging.INFO)

    # Transcripts stay out of the general log.
    transcript_logger = logging.getLogger("callinsights.logs.transcript")
    transcript_logger.handlers.clear()
    transcript_logger.addHandler(
        _rotating_handler(settings.transcript_log_file, "%(asctime)s | %(levelname)s | %(message)s", 500_000)
    )
    transcript_logger.setLevel(logging.INFO)
    transcript_logger.propagate = False

    for name in ("httpx", "httpcore", "multipart"):
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="AI-generated analysis of customer-service call recordings",
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(analysis.router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "status": "operational",
        }

    @app.get("/health", include_in_schema=False)
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(PipelineBusyError)
    async def busy_handler(request: Request, exc: PipelineBusyError):
        return JSONResponse(
            status_code=409,
            content=ErrorResponse(detail=str(exc), code="busy").model_dump(),
        )

    @app.exception_handler(CallAnalysisError)
    async def analysis_error_handler(request: Request, exc: CallAnalysisError):
        category = classify_error(str(exc))
        logger.error("Call analysis failed category=%s: %s", category.code, exc)
        return JSONResponse(
            status_code=category.status_code,
            content=ErrorResponse(detail=category.message, code=category.code).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await close_openai_client()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "callinsights.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
