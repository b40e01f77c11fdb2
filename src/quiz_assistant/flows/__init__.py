"""
Flow definitions for Knowledge Quiz Assistant.
Flows are registered explicitly at startup through ``register_default_flows``.
"""

from quiz_assistant.domain.ports import CompletionService
from quiz_assistant.domain.schemas import (
    EvaluateAnswerInput,
    EvaluateAnswerOutput,
    GenerateQuizInput,
    GenerateQuizOutput,
    QuizSummaryInput,
    QuizSummaryOutput,
    TopicIntroductionInput,
    TopicIntroductionOutput,
)
from quiz_assistant.services import evaluation_service, quiz_service, topic_service
from quiz_assistant.services.evaluation_service import AnswerEvaluationService
from quiz_assistant.services.quiz_service import QuizService
from quiz_assistant.services.topic_service import TopicService

from .registry import Flow, FlowHandler, FlowRegistry

EVALUATE_ANSWER = evaluation_service.FLOW_NAME
GENERATE_KNOWLEDGE_QUIZ = quiz_service.GENERATE_FLOW_NAME
SUMMARIZE_QUIZ = quiz_service.SUMMARY_FLOW_NAME
GET_TOPIC_INTRODUCTION = topic_service.FLOW_NAME


def register_default_flows(registry: FlowRegistry, completion: CompletionService) -> FlowRegistry:
    """Register every built-in flow against one completion backend."""
    evaluator = AnswerEvaluationService(completion)
    quizzes = QuizService(completion)
    topics = TopicService(completion)

    registry.register(
        Flow(
            name=EVALUATE_ANSWER,
            description="Score a quiz answer from 0 to 5 and explain the score.",
            input_schema=EvaluateAnswerInput,
            output_schema=EvaluateAnswerOutput,
            handler=evaluator.evaluate,
        )
    )
    registry.register(
        Flow(
            name=GENERATE_KNOWLEDGE_QUIZ,
            description="Generate open-ended quiz questions for a topic.",
            input_schema=GenerateQuizInput,
            output_schema=GenerateQuizOutput,
            handler=quizzes.generate_quiz,
        )
    )
    registry.register(
        Flow(
            name=SUMMARIZE_QUIZ,
            description="Summarise a finished quiz attempt.",
            input_schema=QuizSummaryInput,
            output_schema=QuizSummaryOutput,
            handler=quizzes.summarize,
        )
    )
    registry.register(
        Flow(
            name=GET_TOPIC_INTRODUCTION,
            description="Introduce the quiz topic before the quiz starts.",
            input_schema=TopicIntroductionInput,
            output_schema=TopicIntroductionOutput,
            handler=topics.introduce,
        )
    )
    return registry


def build_registry(completion: CompletionService) -> FlowRegistry:
    return register_default_flows(FlowRegistry(), completion)


__all__ = [
    "Flow",
    "FlowHandler",
    "FlowRegistry",
    "register_default_flows",
    "build_registry",
    "EVALUATE_ANSWER",
    "GENERATE_KNOWLEDGE_QUIZ",
    "SUMMARIZE_QUIZ",
    "GET_TOPIC_INTRODUCTION",
]
