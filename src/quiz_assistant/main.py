"""
Main application entry point for Knowledge Quiz Assistant.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quiz_assistant.api import router as api_router
from quiz_assistant.core.config import Settings, get_settings, validate_settings
from quiz_assistant.core.middleware import setup_middleware
from quiz_assistant.core.observability import get_structured_logger
from quiz_assistant.domain.ports import CompletionService
from quiz_assistant.flows import build_registry

# Get structured logger
logger = get_structured_logger()


def create_app(
    settings: Optional[Settings] = None, completion_service: Optional[CompletionService] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use instead of the environment
        completion_service: Backend to use instead of the one selected by settings
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create the completion backend and register flows for the app's lifetime."""
        logger.info(f"Starting {settings.app_name}...")

        issues = validate_settings(settings)
        if issues:
            logger.warning(f"Configuration issues: {issues}")

        completion = completion_service
        if completion is None:
            from quiz_assistant.services.completion_service import create_completion_service

            completion = create_completion_service(settings)

        try:
            await completion.initialize()
        except Exception as e:
            logger.warning(f"Completion backend not ready, flows may fail until it is: {e}")

        app.state.settings = settings
        app.state.completion_service = completion
        app.state.flow_registry = build_registry(completion)

        logger.info(f"Registered flows: {app.state.flow_registry.names()}")
        logger.info("Application startup complete")

        yield

        logger.info(f"Shutting down {settings.app_name}...")
        await completion.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description="""
    Quiz assistant whose answers are scored and explained by a language model.
    """,
        version=settings.app_version,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)

    app.include_router(api_router)

    @app.get("/", response_model=dict, tags=["Root"])
    async def root():
        """
        Root endpoint with API information and navigation links.
        """
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "documentation": {
                "swagger_ui": "/docs",
                "redoc": "/redoc",
                "openapi_schema": "/openapi.json",
            },
            "monitoring": {"health": "/healthz", "readiness": "/readyz", "metrics": "/metrics"},
            "api_endpoints": {
                "evaluate_answer": "/v1/answer/evaluate",
                "generate_quiz": "/v1/quiz/generate",
                "quiz_summary": "/v1/quiz/summary",
                "topic_introduction": "/v1/quiz/introduction",
                "flows": "/v1/flows/",
            },
            "completion_provider": settings.llm_provider,
        }

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc):
        """Handle 404 errors."""
        detail = getattr(exc, "detail", None) or "Endpoint not found"
        return JSONResponse(status_code=404, content={"error": detail, "path": str(request.url)})

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "quiz_assistant.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
