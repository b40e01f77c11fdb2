"""
Quiz service: generates knowledge quizzes and summarises finished attempts.
"""

import logging

from pydantic import ValidationError

from quiz_assistant.core.exceptions import FlowOutputError
from quiz_assistant.core.observability import get_observability_service
from quiz_assistant.domain.models import EducationLevel
from quiz_assistant.domain.ports import CompletionRequest, CompletionService
from quiz_assistant.domain.schemas import (
    GenerateQuizInput,
    GenerateQuizOutput,
    QuizSummaryInput,
    QuizSummaryOutput,
)

logger = logging.getLogger(__name__)

GENERATE_FLOW_NAME = "generateKnowledgeQuiz"
SUMMARY_FLOW_NAME = "summarizeQuiz"


def audience_guidance(level: EducationLevel) -> str:
    """Describe how tone and depth should change with the education level."""
    if level.is_lenient:
        return (
            "Use short sentences, everyday words and concrete examples. "
            "Focus on core ideas rather than terminology."
        )
    if level.is_strict:
        return (
            "Use precise, discipline-specific terminology and expect depth, "
            "nuance and rigorous reasoning."
        )
    return "Use clear language with the standard terminology of the subject."


class QuizService:
    """Stateless service for quiz generation and attempt summaries."""

    def __init__(self, completion: CompletionService):
        self.completion = completion
        self.observability = get_observability_service()

    async def generate_quiz(self, request: GenerateQuizInput) -> GenerateQuizOutput:
        """
        Generate open-ended questions with reference answers.

        Raises:
            FlowOutputError: if the backend returns no usable questions
        """
        logger.info(f"{GENERATE_FLOW_NAME}: input received: {request.log_summary()}")

        output = await self.completion.complete(
            CompletionRequest(
                prompt=self.build_quiz_prompt(request),
                output_schema=GenerateQuizOutput,
                attachment=request.attachment,
                flow_name=GENERATE_FLOW_NAME,
            )
        )

        try:
            quiz = GenerateQuizOutput.model_validate(output or {})
        except ValidationError as e:
            logger.error(f"Completion output for {GENERATE_FLOW_NAME} was invalid: {output!r}")
            raise FlowOutputError(GENERATE_FLOW_NAME, "no usable quiz questions returned") from e

        if len(quiz.questions) > request.num_questions:
            logger.info(
                f"Truncating {len(quiz.questions)} generated questions to {request.num_questions}"
            )
            quiz = GenerateQuizOutput(questions=quiz.questions[: request.num_questions])

        logger.info(f"{GENERATE_FLOW_NAME}: generated {len(quiz.questions)} questions")
        return quiz

    def build_quiz_prompt(self, request: GenerateQuizInput) -> str:
        language = request.effective_language
        document_section = ""
        if request.pdf_data_uri is not None:
            document_section = (
                "\nBase the questions primarily on the attached document. "
                "Only use general knowledge about the topic where the document is silent.\n"
            )

        return f"""You are an expert AI educator writing a knowledge quiz.
{document_section}
Topic: {request.topic}
Education Level: {request.education_level}
Language: {language}
Number of questions: {request.num_questions}

Write exactly {request.num_questions} open-ended questions about the topic, in {language}.
* {audience_guidance(request.education_level)}
* Each question must be answerable in a few sentences and test understanding, not trivia.
* Do not repeat questions or ask the same concept twice.
* For each question give a concise reference `answer` in {language} and, optionally, a short `hint` that does not give the answer away.
* Use PLAIN TEXT only, without Markdown formatting.

Return JSON with a `questions` array whose items have `question`, `answer` and optional `hint`.
"""

    async def summarize(self, request: QuizSummaryInput) -> QuizSummaryOutput:
        """
        Summarise a finished quiz attempt.

        Falls back to a score statement when the backend output is unusable.
        """
        logger.info(
            f"{SUMMARY_FLOW_NAME}: {len(request.results)} results, "
            f"score {request.total_score}/{request.max_score}, topic={request.topic!r}"
        )

        output = await self.completion.complete(
            CompletionRequest(
                prompt=self.build_summary_prompt(request),
                output_schema=QuizSummaryOutput,
                flow_name=SUMMARY_FLOW_NAME,
            )
        )

        try:
            return QuizSummaryOutput.model_validate(output or {})
        except ValidationError:
            logger.error(f"Completion output for {SUMMARY_FLOW_NAME} was invalid: {output!r}")
            self.observability.record_fallback(SUMMARY_FLOW_NAME)
            return QuizSummaryOutput(
                summary=(
                    f"You scored {request.total_score} out of {request.max_score} "
                    f"on {request.topic}."
                ),
                strengths=[],
                areas_to_improve=[],
            )

    def build_summary_prompt(self, request: QuizSummaryInput) -> str:
        language = request.effective_language
        results_text = "\n".join(
            f"{i}. Question: {result.question}\n"
            f"   Answer: {result.user_answer}\n"
            f"   Score: {result.awarded_score}/5"
            for i, result in enumerate(request.results, start=1)
        )

        return f"""You are an expert AI educator reviewing a student's completed quiz.

Topic: {request.topic}
Education Level: {request.education_level}
Language: {language}
Total score: {request.total_score} out of {request.max_score}

Results:
{results_text}

Respond in {language}.
1. `summary`: An encouraging overall assessment of the attempt that mentions the total score. {audience_guidance(request.education_level)}
2. `strengths`: Up to three concepts the student clearly understood.
3. `areasToImprove`: Up to three concepts worth revisiting, phrased as concrete study suggestions.
Use PLAIN TEXT only, without Markdown formatting.
"""
