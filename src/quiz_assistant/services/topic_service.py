import logging

from pydantic import ValidationError

from quiz_assistant.core.exceptions import FlowOutputError
from quiz_assistant.domain.ports import CompletionRequest, CompletionService
from quiz_assistant.domain.schemas import TopicIntroductionInput, TopicIntroductionOutput

from .quiz_service import audience_guidance

logger = logging.getLogger(__name__)

FLOW_NAME = "getTopicIntroduction"


class TopicService:
    """Writes a short primer on the quiz topic before the quiz starts."""

    def __init__(self, completion: CompletionService):
        self.completion = completion

    async def introduce(self, request: TopicIntroductionInput) -> TopicIntroductionOutput:
        logger.info(f"{FLOW_NAME}: input received: {request.log_summary()}")

        output = await self.completion.complete(
            CompletionRequest(
                prompt=self.build_prompt(request),
                output_schema=TopicIntroductionOutput,
                attachment=request.attachment,
                flow_name=FLOW_NAME,
            )
        )

        try:
            return TopicIntroductionOutput.model_validate(output or {})
        except ValidationError as e:
            logger.error(f"Completion output for {FLOW_NAME} was invalid: {output!r}")
            raise FlowOutputError(FLOW_NAME, "no usable introduction returned") from e

    def build_prompt(self, request: TopicIntroductionInput) -> str:
        language = request.effective_language
        document_section = ""
        if request.pdf_data_uri is not None:
            document_section = (
                "\nThe student attached a document about this topic. "
                "Introduce the topic the way the document frames it.\n"
            )

        return f"""You are an expert AI educator preparing a student for a quiz.
{document_section}
Topic: {request.topic}
Education Level: {request.education_level}
Language: {language}

1. `introduction`: Two or three short paragraphs in {language} introducing the key ideas of the topic that the quiz will cover. {audience_guidance(request.education_level)} Use PLAIN TEXT only, without Markdown formatting.
2. `imageSuggestion`: If a picture or diagram would help, a one or two-word English image search term. Otherwise omit this field.
"""
