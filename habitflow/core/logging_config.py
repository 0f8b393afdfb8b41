"""Structured logging configuration."""

import logging
import sys
import time
import uuid

import structlog
from fastapi import FastAPI, Request
from pythonjsonlogger import jsonlogger

from habitflow.core.config import settings

SILENT_PATHS = ("/health/z",)


def setup_logging(app: FastAPI) -> FastAPI:
    """Configure structlog + stdlib logging, and log every request."""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.processors.JSONRenderer()
                if settings.LOG_JSON
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_JSON:
        handler.setFormatter(jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        ))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    handler.setLevel(log_level)

    app_logger = logging.getLogger("habitflow")
    app_logger.handlers = [handler]
    app_logger.setLevel(log_level)

    sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
    sqlalchemy_logger.setLevel(logging.WARNING)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=str(uuid.uuid4())[:8],
            method=request.method,
            path=request.url.path,
        )
        start = time.time()
        response = await call_next(request)

        if request.url.path not in SILENT_PATHS:
            duration_ms = (time.time() - start) * 1000
            structlog.get_logger().info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        return response

    return app
