"""
Development entry point.

Loads ``.env``, lists the flows the server will register and starts the API
with auto-reload:

    python -m quiz_assistant.dev
"""

import asyncio
import logging

import uvicorn
from dotenv import load_dotenv

from quiz_assistant.core.config import get_settings, validate_settings
from quiz_assistant.flows import build_registry
from quiz_assistant.services.completion_service import create_completion_service

logger = logging.getLogger("quiz_assistant.dev")


def main() -> None:
    load_dotenv()

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(), format="%(asctime)s | %(levelname)s | %(message)s"
    )

    for issue in validate_settings(settings):
        logger.warning(f"Configuration issue: {issue}")

    # Built only to report what the server registers; the app builds its own at startup.
    completion = create_completion_service(settings)
    registry = build_registry(completion)
    asyncio.run(completion.close())
    logger.info(
        f"Flows for provider {settings.llm_provider}: {', '.join(registry.names())}"
    )

    uvicorn.run(
        "quiz_assistant.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
