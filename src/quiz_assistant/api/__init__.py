"""
API router aggregation for Knowledge Quiz Assistant.
Combines all API endpoints into a single router.
"""

from fastapi import APIRouter, HTTPException, Request

from quiz_assistant.core.config import get_settings
from quiz_assistant.core.observability import get_observability_service

from .answer import router as answer_router
from .flows import router as flows_router
from .quiz import router as quiz_router

# Create main API router
router = APIRouter()

# Include sub-routers with appropriate prefixes and tags
router.include_router(answer_router, prefix="/v1/answer", tags=["Answer"])

router.include_router(quiz_router, prefix="/v1/quiz", tags=["Quiz"])

router.include_router(flows_router, prefix="/v1/flows", tags=["Flows"])


@router.get(
    "/healthz",
    tags=["Monitoring"],
    summary="Health Check",
    description="Fast health check endpoint for load balancers and container orchestration",
)
async def health_check(request: Request):
    """
    Fast health check for load balancers.

    Returns basic application health status without checking external dependencies.
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    observability = get_observability_service()
    return await observability.health_check(settings.app_version)


@router.get(
    "/readyz",
    tags=["Monitoring"],
    summary="Readiness Check",
    description="Readiness check including the completion backend",
)
async def readiness_check(request: Request):
    """
    Comprehensive readiness check.

    Probes the configured completion backend (Ollama or Gemini).
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    observability = get_observability_service()
    return await observability.readiness_check(
        version=settings.app_version,
        completion_service=getattr(request.app.state, "completion_service", None),
    )


@router.get(
    "/metrics",
    tags=["Monitoring"],
    summary="Prometheus Metrics",
    description="Application metrics in Prometheus format",
)
async def metrics(request: Request):
    """
    Prometheus metrics endpoint.

    Includes HTTP request metrics and per-flow call, fallback and latency metrics.
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    if not settings.enable_metrics:
        raise HTTPException(status_code=404, detail="Metrics are disabled")

    observability = get_observability_service()
    return await observability.get_metrics()


__all__ = ["router"]
