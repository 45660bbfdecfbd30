"""Logging middleware for request/response tracking."""

import logging
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.dependencies.common import get_origin_address


def configure_logging(log_level: str = "INFO"):
    """Configure structured logging with JSON output."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all requests and responses with structured logging.
    Never records request bodies, cookies or authorization headers.
    """

    def __init__(self, app, logger_name: str = "marketplace.http"):
        super().__init__(app)
        self.logger = structlog.get_logger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with structured logging."""
        request_id = str(uuid.uuid4())
        start_time = time.time()

        method = request.method
        path = request.url.path
        client_ip = get_origin_address(request)

        self.logger.info(
            "HTTP request started",
            request_id=request_id,
            method=method,
            path=path,
            client_ip=client_ip,
            user_agent=request.headers.get("user-agent", ""),
        )

        request.state.request_id = request_id
        request.state.account_id = None

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            self.logger.error(
                "HTTP request failed with exception",
                request_id=request_id,
                method=method,
                path=path,
                error_type=type(e).__name__,
                process_time_ms=round(process_time * 1000, 2),
                account_id=getattr(request.state, "account_id", None),
                client_ip=client_ip,
            )
            raise

        process_time = time.time() - start_time
        response_data = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "account_id": getattr(request.state, "account_id", None),
            "client_ip": client_ip,
        }

        # Log response with appropriate level based on status code
        if response.status_code < 400:
            self.logger.info("HTTP request completed successfully", **response_data)
        elif response.status_code < 500:
            self.logger.warning("HTTP request completed with client error", **response_data)
        else:
            self.logger.error("HTTP request completed with server error", **response_data)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)
        return response
