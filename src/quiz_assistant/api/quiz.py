import logging

from fastapi import APIRouter, Depends

from quiz_assistant.domain.schemas import (
    GenerateQuizInput,
    GenerateQuizOutput,
    QuizSummaryInput,
    QuizSummaryOutput,
    TopicIntroductionInput,
    TopicIntroductionOutput,
)
from quiz_assistant.flows import (
    GENERATE_KNOWLEDGE_QUIZ,
    GET_TOPIC_INTRODUCTION,
    SUMMARIZE_QUIZ,
    FlowRegistry,
)

from .flows import get_flow_registry, run_flow

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate", response_model=GenerateQuizOutput, response_model_exclude_none=True)
async def generate_quiz(
    request: GenerateQuizInput, registry: FlowRegistry = Depends(get_flow_registry)
) -> GenerateQuizOutput:
    """Generate open-ended questions with reference answers for a topic."""
    return await run_flow(registry, GENERATE_KNOWLEDGE_QUIZ, request)


@router.post("/summary", response_model=QuizSummaryOutput)
async def summarize_quiz(
    request: QuizSummaryInput, registry: FlowRegistry = Depends(get_flow_registry)
) -> QuizSummaryOutput:
    """Summarise a finished quiz attempt with strengths and areas to improve."""
    return await run_flow(registry, SUMMARIZE_QUIZ, request)


@router.post(
    "/introduction", response_model=TopicIntroductionOutput, response_model_exclude_none=True
)
async def introduce_topic(
    request: TopicIntroductionInput, registry: FlowRegistry = Depends(get_flow_registry)
) -> TopicIntroductionOutput:
    """Introduce the quiz topic before the first question."""
    return await run_flow(registry, GET_TOPIC_INTRODUCTION, request)
