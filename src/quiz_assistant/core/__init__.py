"""
Core package for Knowledge Quiz Assistant.
Contains configuration, exceptions, middleware, and observability.
"""

from .config import Settings, get_settings, validate_settings
from .exceptions import (
    CompletionBackendError,
    DocumentError,
    FlowNotFoundError,
    FlowOutputError,
    FlowRegistrationError,
    QuizAssistantError,
)

__all__ = [
    "Settings",
    "get_settings",
    "validate_settings",
    "QuizAssistantError",
    "FlowNotFoundError",
    "FlowRegistrationError",
    "FlowOutputError",
    "DocumentError",
    "CompletionBackendError",
]
