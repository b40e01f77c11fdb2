"""
Completion backends for Knowledge Quiz Assistant.
Each backend turns a prompt plus an output JSON schema into a parsed JSON object.
"""

import json
import logging
import re
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from quiz_assistant.core.config import Settings
from quiz_assistant.core.exceptions import CompletionBackendError
from quiz_assistant.domain.models import PdfAttachment
from quiz_assistant.domain.ports import CompletionRequest, CompletionService

from .document_service import extract_pdf_text

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def parse_json_object(text: str) -> Optional[dict[str, Any]]:
    """
    Extract a JSON object from raw model output.

    Accepts bare JSON, fenced ```json blocks and JSON surrounded by prose.
    Returns None when no JSON object can be recovered.
    """
    if not text or not text.strip():
        return None

    candidates = [text, _FENCE_RE.sub("", text.strip())]

    json_start = text.find("{")
    json_end = text.rfind("}") + 1
    if json_start != -1 and json_end > json_start:
        candidates.append(text[json_start:json_end])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(data, dict):
            return data

    logger.warning(f"No JSON object found in completion output: {text[:200]!r}")
    return None


class OllamaCompletionService:
    """Completion backend using a local Ollama server."""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.base_url = f"http://{settings.ollama_host}:{settings.ollama_port}"
        self.model_name = settings.ollama_model
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.document_max_chars = settings.document_max_chars
        self.timeout = settings.llm_timeout_seconds

        # HTTP client for async requests
        self.client = client or httpx.AsyncClient(timeout=self.timeout)

    async def initialize(self) -> None:
        """Check that Ollama is running and pull the model if it is missing."""
        try:
            model_names = await self._list_models()

            if self.model_name not in model_names:
                logger.warning(
                    f"Model {self.model_name} not found. Available models: {model_names}"
                )
                await self._pull_model()

            logger.info(f"Ollama completion service initialized with model {self.model_name}")

        except Exception as e:
            logger.error(f"Error initializing Ollama completion service: {e}")
            raise

    async def _list_models(self) -> list[str]:
        response = await self.client.get(f"{self.base_url}/api/tags")
        response.raise_for_status()
        return [model.get("name", "") for model in response.json().get("models", [])]

    async def _pull_model(self) -> None:
        """Pull the required model from Ollama."""
        logger.info(f"Pulling model {self.model_name}...")

        response = await self.client.post(
            f"{self.base_url}/api/pull", json={"name": self.model_name, "stream": False}
        )
        response.raise_for_status()

        logger.info(f"Model {self.model_name} pulled successfully")

    async def complete(self, request: CompletionRequest) -> Optional[dict[str, Any]]:
        """Generate a schema-constrained response from Ollama."""
        prompt = request.prompt
        if request.attachment is not None:
            prompt = self._inline_document(prompt, request.attachment)

        payload = {
            "model": self.model_name,
            "prompt": prompt,
            "stream": False,
            "format": request.json_schema(),
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }

        try:
            response = await self.client.post(f"{self.base_url}/api/generate", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Ollama request failed for {request.flow_name}: {e}")
            raise

        return parse_json_object(response.json().get("response", ""))

    def _inline_document(self, prompt: str, attachment: PdfAttachment) -> str:
        """Append the document text, since Ollama cannot read PDFs directly."""
        text = extract_pdf_text(attachment, max_chars=self.document_max_chars)
        if not text:
            return prompt

        return f"{prompt}\n\nAttached document:\n<<<\n{text}\n>>>"

    async def health_check(self) -> dict[str, Any]:
        """Check Ollama reachability and model availability."""
        try:
            model_names = await self._list_models()
            return {
                "healthy": self.model_name in model_names,
                "provider": "ollama",
                "model": self.model_name,
                "base_url": self.base_url,
                "available_models": model_names,
            }
        except Exception as e:
            logger.error(f"Ollama health check failed: {e}")
            return {
                "healthy": False,
                "provider": "ollama",
                "model": self.model_name,
                "base_url": self.base_url,
                "error": str(e),
            }

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()


class GeminiCompletionService:
    """Completion backend using the Gemini API through the google-genai SDK."""

    def __init__(self, settings: Settings, client: Optional[genai.Client] = None):
        self.settings = settings
        self.model_name = settings.gemini_model
        self.api_key = settings.gemini_api_key or ""
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.timeout = settings.llm_timeout_seconds

        self.client = client

    async def initialize(self) -> None:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY missing. Provide it via environment or .env")

        if self.client is None:
            self.client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        logger.info(f"Gemini completion service initialized with model {self.model_name}")

    async def complete(self, request: CompletionRequest) -> Optional[dict[str, Any]]:
        """Generate a schema-constrained response, sending any PDF inline."""
        if self.client is None:
            raise CompletionBackendError("gemini", "client is not initialized")

        contents: list[Any] = [request.prompt]
        if request.attachment is not None:
            contents.append(
                types.Part.from_bytes(
                    data=request.attachment.data, mime_type=request.attachment.mime_type
                )
            )

        config = types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            response_mime_type="application/json",
            response_json_schema=request.json_schema(),
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name, contents=contents, config=config
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini request failed for {request.flow_name}: {e}")
            raise CompletionBackendError("gemini", str(e), status_code=e.code) from e

        text = response.text
        if not text:
            logger.warning(f"Gemini returned no text: {response.prompt_feedback}")
            return None

        return parse_json_object(text)

    async def health_check(self) -> dict[str, Any]:
        """Check that the configured Gemini model is reachable with the API key."""
        if self.client is None:
            return {
                "healthy": False,
                "provider": "gemini",
                "model": self.model_name,
                "error": "client is not initialized",
            }

        try:
            model = await self.client.aio.models.get(model=self.model_name)
            return {
                "healthy": True,
                "provider": "gemini",
                "model": self.model_name,
                "display_name": model.display_name,
            }
        except Exception as e:
            logger.error(f"Gemini health check failed: {e}")
            return {
                "healthy": False,
                "provider": "gemini",
                "model": self.model_name,
                "error": str(e),
            }

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aio.aclose()


def create_completion_service(settings: Settings) -> CompletionService:
    """Build the completion backend selected by ``settings.llm_provider``."""
    if settings.llm_provider == "gemini":
        return GeminiCompletionService(settings)
    return OllamaCompletionService(settings)
