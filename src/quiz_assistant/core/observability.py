"""
Observability module for Knowledge Quiz Assistant.
Implements health checks, readiness checks, and metrics endpoints.
"""

import logging
from datetime import UTC, datetime
from typing import Optional

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from quiz_assistant.domain.ports import CompletionService
from quiz_assistant.domain.schemas import HealthResponse, ReadinessResponse

logger = logging.getLogger(__name__)

# Prometheus metrics
REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_DURATION = Histogram(
    "http_request_duration_seconds", "HTTP request duration", ["method", "endpoint"]
)
FLOW_CALLS = Counter("flow_calls_total", "Flow invocations", ["flow", "outcome"])
FLOW_FALLBACKS = Counter(
    "flow_fallbacks_total", "Flow results replaced by a fallback", ["flow"]
)
FLOW_DURATION = Histogram("flow_duration_seconds", "Flow execution time", ["flow"])


class ObservabilityService:
    """Service for managing observability features."""

    def __init__(self):
        self.startup_time = datetime.now(UTC)

    async def health_check(self, version: str) -> HealthResponse:
        """
        Basic health check - returns app status without external dependencies.
        Fast check for load balancers.
        """
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(UTC),
            services={"app": True},
            version=version,
            details={
                "uptime_seconds": int((datetime.now(UTC) - self.startup_time).total_seconds())
            },
        )

    async def readiness_check(
        self, version: str, completion_service: Optional[CompletionService]
    ) -> ReadinessResponse:
        """
        Comprehensive readiness check - verifies the completion backend.
        """
        if completion_service is None:
            dependencies = {
                "completion": {"healthy": False, "error": "Completion service not initialized"}
            }
        else:
            dependencies = {"completion": await completion_service.health_check()}

        overall_ready = all(dep.get("healthy", False) for dep in dependencies.values())

        return ReadinessResponse(
            ready=overall_ready,
            timestamp=datetime.now(UTC),
            dependencies=dependencies,
            version=version,
        )

    async def get_metrics(self) -> Response:
        """Get Prometheus metrics."""
        try:
            metrics_data = generate_latest()
            return Response(content=metrics_data, media_type=CONTENT_TYPE_LATEST)
        except Exception as e:
            logger.error(f"Error generating metrics: {e}")
            return Response(
                content="# Error generating metrics\n",
                status_code=500,
                media_type=CONTENT_TYPE_LATEST,
            )

    def record_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record request metrics."""
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)

    def record_flow(self, flow: str, outcome: str, duration: float):
        """Record a flow invocation and its latency."""
        FLOW_CALLS.labels(flow=flow, outcome=outcome).inc()
        FLOW_DURATION.labels(flow=flow).observe(duration)

    def record_fallback(self, flow: str):
        """Record that a flow substituted its fallback result."""
        FLOW_FALLBACKS.labels(flow=flow).inc()


# Global observability service instance
observability_service = ObservabilityService()


def get_observability_service() -> ObservabilityService:
    """Get observability service instance."""
    return observability_service


def get_structured_logger(level: str = "INFO") -> logging.Logger:
    """Get structured logger for JSON logging."""
    logger = logging.getLogger("quiz_assistant")

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level.upper())

    return logger
