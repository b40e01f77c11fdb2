import json
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors

from quiz_assistant.core.config import Settings
from quiz_assistant.core.exceptions import CompletionBackendError
from quiz_assistant.domain.models import PdfAttachment
from quiz_assistant.domain.ports import CompletionRequest
from quiz_assistant.domain.schemas import EvaluateAnswerOutput
from quiz_assistant.services import completion_service
from quiz_assistant.services.completion_service import (
    GeminiCompletionService,
    OllamaCompletionService,
    create_completion_service,
    parse_json_object,
)

from .conftest import PDF_BYTES


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def make_request(attachment=None) -> CompletionRequest:
    return CompletionRequest(
        prompt="Evaluate this answer.",
        output_schema=EvaluateAnswerOutput,
        attachment=attachment,
        flow_name="evaluateAnswer",
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ('{"awardedScore": 5}', {"awardedScore": 5}),
        ('```json\n{"awardedScore": 4}\n```', {"awardedScore": 4}),
        ('Here you go: {"awardedScore": 3} hope it helps', {"awardedScore": 3}),
        ("[1, 2, 3]", None),
        ("no json at all", None),
        ("", None),
    ],
)
def test_parse_json_object(text, expected):
    assert parse_json_object(text) == expected


def test_factory_selects_backend():
    assert isinstance(create_completion_service(Settings()), OllamaCompletionService)
    assert isinstance(
        create_completion_service(Settings(llm_provider="gemini", gemini_api_key="k")),
        GeminiCompletionService,
    )


class TestOllama:
    async def test_sends_schema_and_parses_response(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["payload"] = json.loads(request.content)
            return httpx.Response(
                200, json={"response": '{"awardedScore": 5, "explanation": "Correct."}'}
            )

        settings = Settings(ollama_host="ollama", ollama_port=11434, ollama_model="llama3.1:8b")
        service = OllamaCompletionService(settings, client=mock_client(handler))

        result = await service.complete(make_request())

        assert result == {"awardedScore": 5, "explanation": "Correct."}
        assert seen["url"] == "http://ollama:11434/api/generate"
        assert seen["payload"]["model"] == "llama3.1:8b"
        assert seen["payload"]["stream"] is False
        assert seen["payload"]["format"]["properties"]["awardedScore"]["maximum"] == 5
        assert seen["payload"]["prompt"] == "Evaluate this answer."

    async def test_inlines_extracted_document_text(self, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["payload"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "{}"})

        monkeypatch.setattr(
            completion_service, "extract_pdf_text", lambda attachment, max_chars=None: "Page one."
        )
        service = OllamaCompletionService(Settings(), client=mock_client(handler))

        await service.complete(make_request(PdfAttachment(data=PDF_BYTES)))

        prompt = seen["payload"]["prompt"]
        assert prompt.startswith("Evaluate this answer.")
        assert "Attached document:\n<<<\nPage one.\n>>>" in prompt

    async def test_http_errors_propagate(self):
        service = OllamaCompletionService(
            Settings(), client=mock_client(lambda request: httpx.Response(500))
        )

        with pytest.raises(httpx.HTTPStatusError):
            await service.complete(make_request())

    async def test_health_check_reports_model_availability(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"models": [{"name": "llama3.1:8b"}]})

        service = OllamaCompletionService(
            Settings(ollama_model="llama3.1:8b"), client=mock_client(handler)
        )

        health = await service.health_check()

        assert health["healthy"] is True
        assert health["available_models"] == ["llama3.1:8b"]

    async def test_initialize_pulls_missing_model(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            if request.url.path == "/api/tags":
                return httpx.Response(200, json={"models": []})
            return httpx.Response(200, json={"status": "success"})

        service = OllamaCompletionService(Settings(), client=mock_client(handler))

        await service.initialize()

        assert calls == [("GET", "/api/tags"), ("POST", "/api/pull")]


class FakeGeminiModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response

    async def get(self, *, model):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(name=f"models/{model}", display_name="Gemini X")


class FakeGeminiClient:
    def __init__(self, response=None, error=None):
        self.models = FakeGeminiModels(response=response, error=error)
        self.closed = False
        self.aio = SimpleNamespace(models=self.models, aclose=self._aclose)

    async def _aclose(self):
        self.closed = True


def gemini_response(text):
    return SimpleNamespace(text=text, prompt_feedback=None)


class TestGemini:
    @pytest.fixture
    def settings(self):
        return Settings(llm_provider="gemini", gemini_api_key="secret", gemini_model="gemini-x")

    async def test_sends_pdf_inline_and_parses_response(self, settings):
        client = FakeGeminiClient(gemini_response('{"awardedScore": 2, "explanation": "Partly."}'))
        service = GeminiCompletionService(settings, client=client)

        result = await service.complete(make_request(PdfAttachment(data=PDF_BYTES)))

        assert result == {"awardedScore": 2, "explanation": "Partly."}
        call = client.models.calls[0]
        assert call["model"] == "gemini-x"
        assert call["contents"][0] == "Evaluate this answer."
        document = call["contents"][1].inline_data
        assert document.mime_type == "application/pdf"
        assert document.data == PDF_BYTES
        assert call["config"].response_mime_type == "application/json"
        assert "awardedScore" in call["config"].response_json_schema["properties"]

    async def test_prompt_only_without_attachment(self, settings):
        client = FakeGeminiClient(gemini_response("{}"))
        service = GeminiCompletionService(settings, client=client)

        await service.complete(make_request())

        assert client.models.calls[0]["contents"] == ["Evaluate this answer."]

    async def test_empty_response_returns_none(self, settings):
        service = GeminiCompletionService(settings, client=FakeGeminiClient(gemini_response(None)))

        assert await service.complete(make_request()) is None

    async def test_api_errors_become_backend_errors(self, settings):
        error = genai_errors.ServerError(503, {"error": {"message": "unavailable"}})
        service = GeminiCompletionService(settings, client=FakeGeminiClient(error=error))

        with pytest.raises(CompletionBackendError) as exc_info:
            await service.complete(make_request())

        assert exc_info.value.status_code == 503

    async def test_complete_before_initialize_raises(self, settings):
        service = GeminiCompletionService(settings.model_copy(update={"gemini_api_key": None}))

        with pytest.raises(CompletionBackendError):
            await service.complete(make_request())

    async def test_health_check_and_close(self, settings):
        client = FakeGeminiClient()
        service = GeminiCompletionService(settings, client=client)

        health = await service.health_check()
        await service.close()

        assert health["healthy"] is True
        assert health["display_name"] == "Gemini X"
        assert client.closed is True

    async def test_initialize_requires_api_key(self):
        service = GeminiCompletionService(
            Settings(llm_provider="gemini", gemini_api_key=None), client=FakeGeminiClient()
        )

        with pytest.raises(RuntimeError):
            await service.initialize()


def test_extract_pdf_text_returns_empty_for_unreadable_pdf():
    from quiz_assistant.services.document_service import extract_pdf_text

    assert extract_pdf_text(PdfAttachment(data=PDF_BYTES)) == ""


def test_services_package_exports_only_defined_names():
    import quiz_assistant.services as services

    assert all(hasattr(services, name) for name in getattr(services, "__all__", []))
