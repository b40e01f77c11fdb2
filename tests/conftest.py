import base64
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from quiz_assistant.core.config import Settings
from quiz_assistant.domain.ports import CompletionRequest
from quiz_assistant.main import create_app

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"
PDF_DATA_URI = "data:application/pdf;base64," + base64.b64encode(PDF_BYTES).decode("ascii")


class FakeCompletionService:
    """Completion backend returning queued responses and recording requests."""

    def __init__(self):
        self.responses: list[Optional[dict[str, Any]]] = []
        self.requests: list[CompletionRequest] = []
        self.error: Optional[Exception] = None
        self.healthy = True
        self.initialized = False
        self.closed = False

    def queue(self, *responses: Optional[dict[str, Any]]) -> None:
        self.responses.extend(responses)

    async def initialize(self) -> None:
        self.initialized = True

    async def complete(self, request: CompletionRequest) -> Optional[dict[str, Any]]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if not self.responses:
            return None
        return self.responses.pop(0)

    async def health_check(self) -> dict[str, Any]:
        return {"healthy": self.healthy, "provider": "fake"}

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def pdf_data_uri() -> str:
    return PDF_DATA_URI


@pytest.fixture
def fake_completion() -> FakeCompletionService:
    return FakeCompletionService()


@pytest.fixture
def settings() -> Settings:
    return Settings(rate_limit_per_minute=1000, llm_provider="ollama", enable_metrics=True)


@pytest.fixture
def client(settings, fake_completion):
    app = create_app(settings=settings, completion_service=fake_completion)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def math_request() -> dict[str, Any]:
    return {
        "question": "What is 2+2?",
        "userAnswer": "4",
        "topic": "Math",
        "educationLevel": "ElementarySchool",
    }
