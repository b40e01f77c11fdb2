"""
Answer API endpoints for Knowledge Quiz Assistant.
"""

import logging

from fastapi import APIRouter, Depends

from quiz_assistant.domain.schemas import EvaluateAnswerInput, EvaluateAnswerOutput
from quiz_assistant.flows import EVALUATE_ANSWER, FlowRegistry

from .flows import get_flow_registry, run_flow

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/evaluate", response_model=EvaluateAnswerOutput, response_model_exclude_none=True
)
async def evaluate_answer(
    request: EvaluateAnswerInput, registry: FlowRegistry = Depends(get_flow_registry)
) -> EvaluateAnswerOutput:
    """
    Score a free-text answer from 0 to 5 and explain the score.

    Scoring is more lenient for lower education levels. When the model output is
    unusable the response is a zero score with an explanation in the requested
    language, never an error.
    """
    logger.info(
        f"Evaluating answer: topic={request.topic!r}, level={request.education_level}, "
        f"language={request.effective_language}"
    )
    result = await run_flow(registry, EVALUATE_ANSWER, request)
    logger.info(f"Answer evaluated: awarded_score={result.awarded_score}")
    return result
