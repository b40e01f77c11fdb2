import pytest

from quiz_assistant.core.exceptions import FlowOutputError
from quiz_assistant.domain.models import EducationLevel
from quiz_assistant.domain.schemas import (
    GenerateQuizInput,
    QuizSummaryInput,
    TopicIntroductionInput,
)
from quiz_assistant.services.quiz_service import QuizService, audience_guidance
from quiz_assistant.services.topic_service import TopicService


@pytest.fixture
def quiz_service(fake_completion):
    return QuizService(fake_completion)


@pytest.fixture
def topic_service(fake_completion):
    return TopicService(fake_completion)


@pytest.fixture
def summary_request():
    return QuizSummaryInput.model_validate(
        {
            "topic": "Fractions",
            "educationLevel": "MiddleSchool",
            "language": "French",
            "results": [
                {"question": "What is 1/2 + 1/4?", "userAnswer": "3/4", "awardedScore": 5},
                {"question": "Simplify 4/8", "userAnswer": "2/4", "awardedScore": 2},
            ],
        }
    )


def quiz_question(n: int) -> dict:
    return {"question": f"Question {n}?", "answer": f"Answer {n}"}


class TestGenerateQuiz:
    async def test_returns_generated_questions(self, quiz_service, fake_completion):
        fake_completion.queue({"questions": [quiz_question(1), {**quiz_question(2), "hint": "h"}]})

        quiz = await quiz_service.generate_quiz(
            GenerateQuizInput(topic="Volcanoes", education_level="HighSchool", num_questions=2)
        )

        assert [q.question for q in quiz.questions] == ["Question 1?", "Question 2?"]
        assert quiz.questions[1].hint == "h"

    async def test_truncates_extra_questions(self, quiz_service, fake_completion):
        fake_completion.queue({"questions": [quiz_question(n) for n in range(5)]})

        quiz = await quiz_service.generate_quiz(
            GenerateQuizInput(topic="Volcanoes", education_level="HighSchool", num_questions=3)
        )

        assert len(quiz.questions) == 3

    @pytest.mark.parametrize("output", [None, {}, {"questions": []}, {"questions": [{}]}])
    async def test_unusable_output_raises(self, quiz_service, fake_completion, output):
        fake_completion.queue(output)

        with pytest.raises(FlowOutputError):
            await quiz_service.generate_quiz(
                GenerateQuizInput(topic="Volcanoes", education_level="HighSchool")
            )

    def test_prompt_mentions_count_language_and_document(self, quiz_service, pdf_data_uri):
        prompt = quiz_service.build_quiz_prompt(
            GenerateQuizInput(
                topic="Volcanoes",
                education_level="Preschool",
                language="Spanish",
                num_questions=4,
                pdf_data_uri=pdf_data_uri,
            )
        )

        assert "Write exactly 4 open-ended questions" in prompt
        assert "in Spanish" in prompt
        assert "attached document" in prompt
        assert audience_guidance(EducationLevel.PRESCHOOL) in prompt


class TestSummarize:
    async def test_returns_model_summary(self, quiz_service, fake_completion, summary_request):
        fake_completion.queue(
            {
                "summary": "Bon travail !",
                "strengths": ["addition"],
                "areasToImprove": ["simplification"],
            }
        )

        summary = await quiz_service.summarize(summary_request)

        assert summary.summary == "Bon travail !"
        assert summary.areas_to_improve == ["simplification"]
        assert fake_completion.requests[0].attachment is None

    async def test_malformed_output_falls_back_to_score(
        self, quiz_service, fake_completion, summary_request
    ):
        fake_completion.queue({"strengths": ["addition"]})

        summary = await quiz_service.summarize(summary_request)

        assert summary.summary == "You scored 7 out of 10 on Fractions."
        assert summary.strengths == []
        assert summary.areas_to_improve == []

    def test_prompt_lists_results(self, quiz_service, summary_request):
        prompt = quiz_service.build_summary_prompt(summary_request)

        assert "Total score: 7 out of 10" in prompt
        assert "1. Question: What is 1/2 + 1/4?" in prompt
        assert "Score: 2/5" in prompt
        assert "Respond in French." in prompt


class TestTopicIntroduction:
    async def test_returns_introduction(self, topic_service, fake_completion):
        fake_completion.queue(
            {"introduction": "Photosynthesis turns light into food.", "imageSuggestion": "leaf"}
        )

        intro = await topic_service.introduce(
            TopicIntroductionInput(topic="Photosynthesis", education_level="ElementarySchool")
        )

        assert intro.introduction == "Photosynthesis turns light into food."
        assert intro.image_suggestion == "leaf"

    async def test_unusable_output_raises(self, topic_service, fake_completion):
        fake_completion.queue({"introduction": "  "})

        with pytest.raises(FlowOutputError):
            await topic_service.introduce(
                TopicIntroductionInput(topic="Photosynthesis", education_level="PhD")
            )

    def test_prompt_uses_strict_guidance_for_phd(self, topic_service):
        prompt = topic_service.build_prompt(
            TopicIntroductionInput(topic="Topology", education_level="PhD")
        )

        assert audience_guidance(EducationLevel.PHD) in prompt
        assert "in English" in prompt
