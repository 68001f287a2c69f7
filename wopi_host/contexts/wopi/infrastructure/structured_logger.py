"""
Structured logging configuration for WOPI context.
"""

import structlog
import logging
import sys
import time
import uuid
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from .config import settings


def configure_structured_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str = "wopi-host",
    environment: str = "development",
) -> structlog.BoundLogger:
    """Configure structured logging with context."""

    # Configure timestamp
    def add_timestamp(_, __, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
        return event_dict

    # Add service context
    def add_service_context(_, __, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict["service"] = service_name
        event_dict.setdefault("environment", environment)
        return event_dict

    processors = [
        add_timestamp,
        add_service_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    return structlog.get_logger()


def redact_token(access_token: Optional[str]) -> str:
    """Short, log-safe identifier of an access token."""
    if not access_token:
        return ""
    return access_token[:8] + "..."


class WOPILogger:
    """WOPI-specific logger with predefined contexts."""

    def __init__(self, logger: structlog.BoundLogger):
        self.logger = logger

    def bind_request(self, request_id: str, method: str, path: str):
        """Bind HTTP request context."""
        return self.logger.bind(
            request_id=request_id,
            http_method=method,
            http_path=path
        )

    def log_token_validated(
        self,
        token_id: str,
        valid: bool,
        reason: str = None
    ):
        """Log token validation event."""
        self.logger.info(
            "wopi.token.validated",
            token_id=token_id,
            valid=valid,
            reason=reason,
            event_type="security"
        )

    def log_file_accessed(
        self,
        file_id: str,
        user_id: str,
        operation: str,
        success: bool,
        size_bytes: int = None
    ):
        """Log file access event."""
        self.logger.info(
            "wopi.file.accessed",
            file_id=file_id,
            user_id=user_id,
            operation=operation,
            success=success,
            size_bytes=size_bytes,
            event_type="file_operation"
        )

    def log_error(
        self,
        error_type: str,
        error_message: str,
        context: Dict[str, Any] = None
    ):
        """Log error event."""
        self.logger.error(
            "wopi.error",
            error_type=error_type,
            error_message=error_message,
            context=context or {},
            event_type="error"
        )


_structured_logger = configure_structured_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
    service_name=settings.service_name,
    environment=settings.environment,
)
wopi_logger = WOPILogger(_structured_logger)


class LoggingMiddleware:
    """Middleware for structured request/response logging."""

    def __init__(self, app):
        self.app = app
        self.logger = wopi_logger

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        # Read back by the error handlers through request.state
        scope.setdefault("state", {})["request_id"] = request_id
        started_at = time.monotonic()
        # Never log the query string, it carries the access token
        request_logger = self.logger.bind_request(
            request_id=request_id,
            method=scope["method"],
            path=scope["path"]
        )
        request_logger.info("request.started")

        status_code = None

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            request_logger.error(
                "request.failed",
                error=str(e),
                duration_ms=(time.monotonic() - started_at) * 1000
            )
            raise

        request_logger.info(
            "request.completed",
            status_code=status_code,
            duration_ms=(time.monotonic() - started_at) * 1000
        )
