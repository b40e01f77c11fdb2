"""
Middleware for Knowledge Quiz Assistant.
Implements security headers, rate limiting, correlation ids and request logging.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from .config import Settings
from .observability import get_observability_service

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client sliding-window rate limiting."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings
        self.requests: dict[str, list] = {}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Apply rate limiting to requests."""
        client_ip = request.client.host if request.client else "unknown"
        current_time = time.time()

        # Keep last minute
        recent = [
            req_time for req_time in self.requests.get(client_ip, []) if current_time - req_time < 60
        ]
        self._forget_idle_clients(current_time)
        self.requests[client_ip] = recent

        if len(self.requests[client_ip]) >= self.settings.rate_limit_per_minute:
            logger.warning(f"Rate limit exceeded for IP {client_ip}")
            return JSONResponse(
                status_code=429, content={"detail": "Rate limit exceeded. Please try again later."}
            )

        self.requests[client_ip].append(current_time)

        return await call_next(request)

    def _forget_idle_clients(self, current_time: float) -> None:
        """Drop clients with no request in the last minute."""
        idle = [
            ip for ip, times in self.requests.items() if not times or current_time - times[-1] >= 60
        ]
        for ip in idle:
            del self.requests[ip]


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Correlation ID middleware for request tracing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add correlation ID to requests."""
        correlation_id = request.headers.get("x-correlation-id") or str(uuid.uuid4())

        request.state.correlation_id = correlation_id

        response = await call_next(request)

        response.headers["x-correlation-id"] = correlation_id

        return response


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Structured JSON logging middleware with observability integration."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings
        self.observability = get_observability_service()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add structured logging and metrics to requests."""
        start_time = time.time()
        correlation_id = getattr(request.state, "correlation_id", "unknown")

        # The body is left for the endpoint handlers; attachments can be large.
        log_context = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
        }

        logger.info(json.dumps({"event": "request_started", **log_context}))

        status_code = 500
        error = None
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            error = str(e)
            logger.error(json.dumps({"event": "request_error", "error": error, **log_context}))
            raise
        finally:
            latency_seconds = time.time() - start_time

            if self.settings.enable_metrics:
                self.observability.record_request(
                    method=request.method,
                    endpoint=request.url.path,
                    status_code=status_code,
                    duration=latency_seconds,
                )

            logger.info(
                json.dumps(
                    {
                        "event": "request_completed",
                        "status_code": status_code,
                        "latency_ms": round(latency_seconds * 1000, 2),
                        "error": error,
                        **log_context,
                    }
                )
            )

        return response


class SecurityMiddleware(BaseHTTPMiddleware):
    """Security headers and optional Content Security Policy."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings
        # Documentation endpoints that need relaxed CSP
        self.docs_endpoints = ["/docs", "/redoc", "/openapi.json"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Apply security measures to requests."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if self.settings.csp_strict:
            if request.url.path in self.docs_endpoints and self.settings.docs_csp_relaxed:
                # Swagger UI and ReDoc need inline scripts and CDN assets
                csp = (
                    "default-src 'self'; "
                    "script-src 'self' 'unsafe-inline' 'unsafe-eval' https:; "
                    "style-src 'self' 'unsafe-inline' https:; "
                    "img-src 'self' data: https:; "
                    "connect-src 'self'; "
                    "font-src 'self' data: https:; "
                    "object-src 'none'; "
                    "base-uri 'self'"
                )
            else:
                csp = (
                    "default-src 'self'; "
                    "script-src 'self'; "
                    "style-src 'self' 'unsafe-inline'; "
                    "img-src 'self' data: https:; "
                    "connect-src 'self'"
                )
            response.headers["Content-Security-Policy"] = csp

        return response


def setup_cors_middleware(app, settings: Settings):
    """Setup CORS middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )


def setup_middleware(app, settings: Settings):
    """Setup all middleware for the application."""
    # Add middleware in reverse order (last added is first executed)

    app.add_middleware(SecurityMiddleware, settings=settings)

    app.add_middleware(StructuredLoggingMiddleware, settings=settings)

    app.add_middleware(CorrelationMiddleware)

    app.add_middleware(RateLimitMiddleware, settings=settings)

    setup_cors_middleware(app, settings)
