"""
Domain layer for Knowledge Quiz Assistant.
Contains ports (interfaces), models (entities), and schemas (DTOs).
"""

from .models import DEFAULT_LANGUAGE, EducationLevel, PdfAttachment, SupportedLanguage
from .ports import CompletionRequest, CompletionService
from .schemas import (
    EvaluateAnswerInput,
    EvaluateAnswerOutput,
    FlowInfo,
    GenerateQuizInput,
    GenerateQuizOutput,
    HealthResponse,
    QuestionResult,
    QuizQuestion,
    QuizSummaryInput,
    QuizSummaryOutput,
    ReadinessResponse,
    TopicIntroductionInput,
    TopicIntroductionOutput,
)

__all__ = [
    # Models (domain entities)
    "EducationLevel",
    "SupportedLanguage",
    "DEFAULT_LANGUAGE",
    "PdfAttachment",
    # Ports (interfaces)
    "CompletionRequest",
    "CompletionService",
    # Schemas (DTOs)
    "EvaluateAnswerInput",
    "EvaluateAnswerOutput",
    "GenerateQuizInput",
    "GenerateQuizOutput",
    "QuizQuestion",
    "QuizSummaryInput",
    "QuizSummaryOutput",
    "QuestionResult",
    "TopicIntroductionInput",
    "TopicIntroductionOutput",
    "FlowInfo",
    "HealthResponse",
    "ReadinessResponse",
]
