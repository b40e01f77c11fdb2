"""
Exception hierarchy for Knowledge Quiz Assistant.
"""

from typing import Optional


class QuizAssistantError(Exception):
    """Base class for application errors."""


class FlowNotFoundError(QuizAssistantError):
    """Raised when a flow name is not present in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Flow '{name}' is not registered")
        self.name = name


class FlowRegistrationError(QuizAssistantError):
    """Raised when a flow is registered twice under the same name."""


class FlowOutputError(QuizAssistantError):
    """Raised when a flow cannot produce usable output and has no fallback."""

    def __init__(self, flow_name: str, message: str):
        super().__init__(f"{flow_name}: {message}")
        self.flow_name = flow_name


class DocumentError(QuizAssistantError, ValueError):
    """Raised when an attached document cannot be decoded."""


class CompletionBackendError(QuizAssistantError):
    """Raised when the completion backend rejects or fails a request."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code
