"""
Domain ports (interfaces) for the Knowledge Quiz Assistant.
"""

from abc import abstractmethod
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from .models import PdfAttachment


class CompletionRequest(BaseModel):
    """A prompt, the schema its answer must follow and an optional document."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    prompt: str = Field(..., description="Natural-language instruction")
    output_schema: type[BaseModel] = Field(..., description="Schema of the expected JSON output")
    attachment: Optional[PdfAttachment] = Field(None, description="Document for grounding")
    flow_name: Optional[str] = Field(None, description="Calling flow, for logging")

    def json_schema(self) -> dict[str, Any]:
        return self.output_schema.model_json_schema(by_alias=True)


class CompletionService(Protocol):
    """Port for schema-constrained text completion."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (connectivity checks, model warm-up)."""
        pass

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> Optional[dict[str, Any]]:
        """
        Run the prompt and return the parsed JSON object.

        Returns None when the backend produced nothing that parses as a JSON object.
        """
        pass

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Check backend reachability; the result carries a boolean 'healthy' key."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        pass
