"""
Answer evaluation service.
Scores a free-text quiz answer from 0 to 5 and explains the score, adapting
strictness and tone to the student's education level.
"""

import logging

from pydantic import ValidationError

from quiz_assistant.core.observability import get_observability_service
from quiz_assistant.domain.models import SupportedLanguage
from quiz_assistant.domain.ports import CompletionRequest, CompletionService
from quiz_assistant.domain.schemas import EvaluateAnswerInput, EvaluateAnswerOutput

logger = logging.getLogger(__name__)

FLOW_NAME = "evaluateAnswer"

FALLBACK_MESSAGES: dict[SupportedLanguage, str] = {
    SupportedLanguage.ENGLISH: (
        "Could not determine the score or provide a detailed explanation in {language} "
        "at this time. Please ensure your answer is clear."
    ),
    SupportedLanguage.SPANISH: (
        "No se pudo determinar la puntuación ni proporcionar una explicación detallada "
        "en {language} en este momento. Por favor, asegúrese de que su respuesta sea clara."
    ),
    SupportedLanguage.FRENCH: (
        "Impossible de déterminer le score ou de fournir une explication détaillée "
        "en {language} pour le moment. Veuillez vous assurer que votre réponse est claire."
    ),
}


def fallback_result(language: SupportedLanguage) -> EvaluateAnswerOutput:
    """Zero score with an apology in the student's language (English if untranslated)."""
    template = FALLBACK_MESSAGES.get(language, FALLBACK_MESSAGES[SupportedLanguage.ENGLISH])
    return EvaluateAnswerOutput(
        awarded_score=0,
        explanation=template.format(language=language.value),
        image_suggestion=None,
    )


class AnswerEvaluationService:
    """Stateless service evaluating one answer per call."""

    def __init__(self, completion: CompletionService):
        self.completion = completion
        self.observability = get_observability_service()

    async def evaluate(self, request: EvaluateAnswerInput) -> EvaluateAnswerOutput:
        """
        Evaluate a user's answer.

        Malformed completion output is never raised; it is replaced by the
        fallback result for the request language.

        Args:
            request: Question, answer and audience metadata

        Returns:
            Score, explanation and optional image suggestion
        """
        logger.info(f"{FLOW_NAME}: input received: {request.log_summary()}")

        completion_request = CompletionRequest(
            prompt=self.build_prompt(request),
            output_schema=EvaluateAnswerOutput,
            attachment=request.attachment,
            flow_name=FLOW_NAME,
        )

        output = await self.completion.complete(completion_request)

        if not output:
            logger.error(f"Completion output for {FLOW_NAME} was empty or not JSON: {output!r}")
            return self._fallback(request)

        try:
            result = EvaluateAnswerOutput.model_validate(output)
        except ValidationError as e:
            logger.error(
                f"Completion output for {FLOW_NAME} was invalid or incomplete: {output!r} "
                f"({e.error_count()} errors: {e.errors(include_url=False, include_context=False)})"
            )
            return self._fallback(request)

        logger.info(
            f"{FLOW_NAME}: awarded_score={result.awarded_score}, "
            f"image_suggestion={result.image_suggestion!r}"
        )
        return result

    def _fallback(self, request: EvaluateAnswerInput) -> EvaluateAnswerOutput:
        self.observability.record_fallback(FLOW_NAME)
        return fallback_result(request.effective_language)

    def build_prompt(self, request: EvaluateAnswerInput) -> str:
        """Assemble the evaluation instruction for the completion backend."""
        language = request.effective_language
        has_document = request.pdf_data_uri is not None

        document_section = ""
        if has_document:
            document_section = (
                "\nThe student may have been referring to the attached document for context. "
                "If the question or answer relates to it, ensure your evaluation, score, and "
                "explanation are consistent with this document.\n"
            )

        document_criterion = ", and provided document context" if has_document else ""

        return f"""You are an expert AI educator evaluating a student's answer to a quiz question. Your goal is to provide a fair score (0-5) and a comprehensive, teacher-like explanation to help the student understand the concept in their chosen language.
{document_section}
Topic: {request.topic}
Education Level: {request.education_level}
Language for explanation: {language}.

Question (this question was presented to the user in {language}): {request.question}
User's Answer: {request.user_answer}

Please provide your response in {language}.
1. `awardedScore`: An integer score from 0 to 5 based on the correctness and completeness of the user's answer relative to the question, topic, education level{document_criterion}.
   * Adapt your scoring strictness to the student's `educationLevel`.
     * For lower levels (e.g., Preschool, ElementarySchool, MiddleSchool), be more lenient. Focus on whether the core concept is grasped, even if the answer is simple or uses basic language. A partially correct or very simple but relevant answer might still earn a 2 or 3.
     * For higher levels (e.g., College, Graduate, PhD), be stricter. Expect more depth, precision, use of specific terminology, and comprehensive understanding. Minor inaccuracies or lack of detail will result in a lower score compared to the same answer at a lower education level.
   * General Scoring Guide (apply with education level in mind):
     * 0: Completely incorrect, irrelevant, or nonsensical.
     * 1: Shows minimal understanding, perhaps a relevant keyword but fundamentally flawed or very incomplete.
     * 2: Basic understanding, some correct points but significant inaccuracies or omissions for the level.
     * 3: Partially correct; understands the main concepts but has some inaccuracies or lacks depth/detail expected for the level.
     * 4: Mostly correct and well-understood; minor inaccuracies or could be slightly more detailed/clearer for the level.
     * 5: Fully correct, comprehensive for the education level, and clearly articulated.
2. `explanation`: A detailed, teacher-like explanation.
   * Regardless of the score, explain the reasoning behind it in {language}.
   * If the score is less than 5, clearly explain the misunderstanding, errors, or omissions, keeping the student's `educationLevel` in mind. Provide the correct information and explain the reasoning behind it in an age-appropriate manner.
   * If the score is 5, reinforce why the answer is excellent, perhaps adding a bit more relevant detail or context suitable for the `educationLevel`.
   * The explanation MUST be tailored to the student's specified education level and language ({language}). It should help them understand the concept better. Use analogies or simpler terms if appropriate for the level and language.
   * IMPORTANT: The explanation should be in PLAIN TEXT only. Do NOT use Markdown formatting like bold, italics, or table structures. Use natural language and paragraphs for clear separation of ideas.
3. `imageSuggestion`: If a simple image, diagram, or pictorial could significantly help in understanding the explanation (e.g., for visual concepts like a cell structure, a historical map, a type of rock), provide a one or two-word search term for such an image. Examples: "cell mitosis", "roman aqueduct", "igneous rock". If no image is particularly helpful, omit this field. Maximum two words. These terms should be in English or a broadly understandable format for image search.

Ensure your output strictly adheres to the requested JSON format and that the explanation is thorough, pedagogical, plain text, and in the specified language ({language}).
"""
