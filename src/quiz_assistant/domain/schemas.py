"""
Request/response schemas (DTOs) for the Knowledge Quiz Assistant.
Flow input/output contracts use camelCase on the wire and snake_case in Python.
"""

import json
from datetime import UTC, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import DEFAULT_LANGUAGE, EducationLevel, PdfAttachment, SupportedLanguage

MAX_SCORE = 5
MAX_IMAGE_SUGGESTION_WORDS = 2


def require_text(value: str, field: str) -> str:
    """Reject model prose that is empty or only whitespace; otherwise keep it verbatim."""
    if not value.strip():
        raise ValueError(f"{field} must not be empty")
    return value


def image_search_term(value: Optional[str]) -> Optional[str]:
    """Keep at most two words of an image search suggestion; drop blanks."""
    if value is None:
        return None
    words = value.split()
    if not words:
        return None
    return " ".join(words[:MAX_IMAGE_SUGGESTION_WORDS])


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FlowInput(CamelModel):
    """Fields shared by every flow input: topic, audience and language."""

    topic: str = Field(..., description="The general topic of the quiz.")
    education_level: EducationLevel = Field(
        ..., description="The target education level for the quiz."
    )
    language: Optional[SupportedLanguage] = Field(
        None, description="The language for the response. Defaults to English."
    )

    @property
    def effective_language(self) -> SupportedLanguage:
        return self.language or DEFAULT_LANGUAGE

    def log_summary(self) -> str:
        """JSON rendering for logs with any attached document reduced to its size."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"pdf_data_uri"})
        attachment = getattr(self, "attachment", None)
        if attachment is not None:
            data["pdfDataUri"] = f"<{attachment.size} bytes>"
        return json.dumps(data, ensure_ascii=False)


class DocumentFlowInput(FlowInput):
    """Flow input that may carry a PDF document for grounding."""

    pdf_data_uri: Optional[str] = Field(
        None,
        description=(
            "A PDF document provided by the user, as a data URI. "
            "Expected format: 'data:application/pdf;base64,<encoded_data>'."
        ),
    )

    @field_validator("pdf_data_uri")
    @classmethod
    def _validate_pdf_data_uri(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        PdfAttachment.from_data_uri(value)
        return value

    @property
    def attachment(self) -> Optional[PdfAttachment]:
        if not self.pdf_data_uri:
            return None
        return PdfAttachment.from_data_uri(self.pdf_data_uri)


# --- Evaluate answer ---
class EvaluateAnswerInput(DocumentFlowInput):
    """Request schema for the evaluateAnswer flow."""

    question: str = Field(..., description="The quiz question that was asked.")
    user_answer: str = Field(..., description="The user's answer to the question.")


class EvaluateAnswerOutput(CamelModel):
    """Structured evaluation returned by the evaluateAnswer flow."""

    awarded_score: int = Field(
        ...,
        ge=0,
        le=MAX_SCORE,
        description=(
            "The score awarded to the user answer, on a scale of 0 to 5. 0: incorrect, "
            "1-2: basic/partially correct, 3: mostly correct with minor issues, "
            "4: very good, 5: excellent/fully comprehensive for the level."
        ),
    )
    explanation: str = Field(
        ...,
        description=(
            "A detailed, teacher-like explanation for the score, tailored to the education "
            "level and specified language. Plain text, without Markdown formatting."
        ),
    )
    image_suggestion: Optional[str] = Field(
        None,
        description=(
            "A one or two-word search term for an image that could visually clarify the "
            "explanation, if applicable. E.g. 'photosynthesis diagram'."
        ),
    )

    @field_validator("awarded_score", mode="before")
    @classmethod
    def _require_numeric_score(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("awardedScore must be a number")
        return value

    @field_validator("explanation")
    @classmethod
    def _require_explanation(cls, value: str) -> str:
        return require_text(value, "explanation")

    @field_validator("image_suggestion")
    @classmethod
    def _limit_image_suggestion(cls, value: Optional[str]) -> Optional[str]:
        return image_search_term(value)


# --- Knowledge quiz ---
class GenerateQuizInput(DocumentFlowInput):
    """Request schema for the generateKnowledgeQuiz flow."""

    num_questions: int = Field(5, ge=1, le=20, description="Number of questions to generate.")


class QuizQuestion(CamelModel):
    """A single open-ended quiz question with its reference answer."""

    question: str = Field(..., min_length=1, description="Question text")
    answer: str = Field(..., min_length=1, description="Reference answer")
    hint: Optional[str] = Field(None, description="Optional hint shown on request")


class GenerateQuizOutput(CamelModel):
    """Generated quiz questions."""

    questions: list[QuizQuestion] = Field(..., min_length=1, description="Quiz questions")


# --- Quiz summary ---
class QuestionResult(CamelModel):
    """Outcome of one answered question."""

    question: str = Field(..., description="Question text")
    user_answer: str = Field(..., description="The user's answer")
    awarded_score: int = Field(..., ge=0, le=MAX_SCORE, description="Score awarded (0-5)")


class QuizSummaryInput(FlowInput):
    """Request schema for the summarizeQuiz flow."""

    results: list[QuestionResult] = Field(..., min_length=1, description="Answered questions")

    @property
    def total_score(self) -> int:
        return sum(result.awarded_score for result in self.results)

    @property
    def max_score(self) -> int:
        return MAX_SCORE * len(self.results)


class QuizSummaryOutput(CamelModel):
    """Feedback on a finished quiz attempt."""

    summary: str = Field(..., description="Overall feedback in plain text")
    strengths: list[str] = Field(default_factory=list, description="What the student did well")
    areas_to_improve: list[str] = Field(
        default_factory=list, description="Concepts worth revisiting"
    )

    @field_validator("summary")
    @classmethod
    def _require_summary(cls, value: str) -> str:
        return require_text(value, "summary")


# --- Topic introduction ---
class TopicIntroductionInput(DocumentFlowInput):
    """Request schema for the getTopicIntroduction flow."""


class TopicIntroductionOutput(CamelModel):
    """Short primer on the quiz topic."""

    introduction: str = Field(..., description="Introduction in plain text")
    image_suggestion: Optional[str] = Field(
        None, description="A one or two-word image search term, if helpful."
    )

    @field_validator("introduction")
    @classmethod
    def _require_introduction(cls, value: str) -> str:
        return require_text(value, "introduction")

    @field_validator("image_suggestion")
    @classmethod
    def _limit_image_suggestion(cls, value: Optional[str]) -> Optional[str]:
        return image_search_term(value)


# --- Registry / monitoring ---
class FlowInfo(BaseModel):
    """Description of a registered flow."""

    name: str = Field(..., description="Flow name used for dispatch")
    description: str = Field(..., description="What the flow does")
    input_schema: dict[str, Any] = Field(..., description="JSON schema of the flow input")
    output_schema: dict[str, Any] = Field(..., description="JSON schema of the flow output")


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Service health status"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Health check timestamp"
    )
    services: dict[str, bool] = Field(..., description="Individual service health status")
    version: str = Field(..., description="Application version")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional health details")


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    ready: bool = Field(..., description="Whether service is ready")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Readiness check timestamp"
    )
    dependencies: dict[str, dict[str, Any]] = Field(..., description="Dependency status details")
    version: str = Field(..., description="Application version")
