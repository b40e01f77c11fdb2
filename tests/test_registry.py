import pytest
from pydantic import ValidationError

from quiz_assistant.core.exceptions import FlowNotFoundError, FlowRegistrationError
from quiz_assistant.domain.schemas import EvaluateAnswerInput, EvaluateAnswerOutput
from quiz_assistant.flows import (
    EVALUATE_ANSWER,
    GENERATE_KNOWLEDGE_QUIZ,
    GET_TOPIC_INTRODUCTION,
    SUMMARIZE_QUIZ,
    Flow,
    FlowRegistry,
    build_registry,
)


async def echo_handler(request: EvaluateAnswerInput) -> EvaluateAnswerOutput:
    return EvaluateAnswerOutput(awarded_score=1, explanation=f"Echo: {request.user_answer}")


def echo_flow(name: str = "echo") -> Flow:
    return Flow(
        name=name,
        description="Echo the answer back.",
        input_schema=EvaluateAnswerInput,
        output_schema=EvaluateAnswerOutput,
        handler=echo_handler,
    )


def test_default_flows_are_registered(fake_completion):
    registry = build_registry(fake_completion)

    assert registry.names() == [
        EVALUATE_ANSWER,
        GENERATE_KNOWLEDGE_QUIZ,
        SUMMARIZE_QUIZ,
        GET_TOPIC_INTRODUCTION,
    ]
    assert len(registry) == 4
    assert "evaluateAnswer" in registry


def test_duplicate_registration_is_rejected():
    registry = FlowRegistry()
    registry.register(echo_flow())

    with pytest.raises(FlowRegistrationError):
        registry.register(echo_flow())


def test_unknown_flow_raises():
    with pytest.raises(FlowNotFoundError) as exc_info:
        FlowRegistry().get("missing")

    assert exc_info.value.name == "missing"


async def test_run_validates_raw_payload(math_request):
    registry = FlowRegistry()
    registry.register(echo_flow())

    result = await registry.run("echo", math_request)

    assert result.explanation == "Echo: 4"


async def test_run_accepts_model_instance(math_request):
    registry = FlowRegistry()
    registry.register(echo_flow())

    result = await registry.run("echo", EvaluateAnswerInput.model_validate(math_request))

    assert result.awarded_score == 1


async def test_run_rejects_invalid_payload():
    registry = FlowRegistry()
    registry.register(echo_flow())

    with pytest.raises(ValidationError):
        await registry.run("echo", {"question": "Missing everything else"})


async def test_run_unknown_flow_raises(math_request):
    with pytest.raises(FlowNotFoundError):
        await FlowRegistry().run("missing", math_request)


def test_describe_exposes_schemas(fake_completion):
    infos = {info.name: info for info in build_registry(fake_completion).describe()}

    evaluate = infos[EVALUATE_ANSWER]
    assert "userAnswer" in evaluate.input_schema["properties"]
    assert "awardedScore" in evaluate.output_schema["properties"]
    assert evaluate.output_schema["properties"]["awardedScore"]["maximum"] == 5
