"""Tests for request validation and result models."""

import pytest
from pydantic import ValidationError

from interview_gen.errors import RequestValidationError
from interview_gen.models import (
    OUTPUT_SCHEMAS,
    Feedback,
    QuizItem,
    StructuredResume,
    StudyPlanWeek,
    UseCase,
)
from interview_gen.request import GenerationRequest


class TestGenerationRequest:
    """Tests for GenerationRequest.create."""

    def test_questions_request(self, questions_params):
        """Test a valid questions request carries its limit and schema."""
        request = GenerationRequest.create("questions", questions_params)

        assert request.use_case == UseCase.QUESTIONS
        assert request.item_limit == 5
        assert request.output_schema == OUTPUT_SCHEMAS[UseCase.QUESTIONS]
        assert request.params["subjects_or_topics"] == ["Data Structures", "Algorithms"]

    def test_params_are_read_only(self, quiz_params):
        """Test the validated parameters cannot be mutated."""
        request = GenerationRequest.create(UseCase.QUIZ, quiz_params)

        with pytest.raises(TypeError):
            request.params["topic"] = "Other"

    def test_quiz_defaults_applied(self):
        """Test quiz defaults for count, difficulty and language."""
        request = GenerationRequest.create(UseCase.QUIZ, {"topic": "Graphs"})

        assert request.params["num_questions"] == 5
        assert request.params["difficulty"] == "medium"
        assert request.params["language"] == "en"
        assert request.item_limit is None

    def test_missing_param(self):
        """Test a missing required field is reported."""
        with pytest.raises(RequestValidationError) as exc_info:
            GenerationRequest.create(UseCase.FEEDBACK, {"answer": "x", "question": "y"})

        assert exc_info.value.use_case == "feedback"
        assert any("job_role" in problem for problem in exc_info.value.errors)

    def test_duration_too_short(self, questions_params):
        """Test interviews shorter than two minutes are rejected."""
        with pytest.raises(RequestValidationError):
            GenerationRequest.create(
                UseCase.QUESTIONS, dict(questions_params, duration=1)
            )

    def test_fractional_duration_accepted(self, questions_params):
        """Test a non-integer duration validates and floors the item limit."""
        request = GenerationRequest.create(
            UseCase.QUESTIONS, dict(questions_params, duration=7.5)
        )

        assert request.params["duration"] == 7.5
        assert request.item_limit == 3

    def test_empty_topics(self, questions_params):
        """Test at least one topic is required."""
        with pytest.raises(RequestValidationError):
            GenerationRequest.create(
                UseCase.QUESTIONS, dict(questions_params, subjects_or_topics=[])
            )

    def test_follow_up_minimum_length(self):
        """Test follow-up inputs need at least five characters."""
        with pytest.raises(RequestValidationError):
            GenerationRequest.create(
                UseCase.FOLLOW_UP, {"last_question": "Why?", "user_answer": "Because it is"}
            )

    @pytest.mark.parametrize(
        "field,value", [("days_per_week", 8), ("total_duration_weeks", 0), ("hours_per_day", 0)]
    )
    def test_study_plan_ranges(self, field, value):
        """Test study plan numeric ranges."""
        params = {
            "goal": "Data Engineer",
            "hours_per_day": 2,
            "days_per_week": 5,
            "skill_level": "beginner",
            "total_duration_weeks": 8,
        }
        params[field] = value
        with pytest.raises(RequestValidationError):
            GenerationRequest.create(UseCase.STUDY_PLAN, params)

    def test_unknown_use_case(self):
        """Test unknown use case names are a validation error."""
        with pytest.raises(RequestValidationError, match="unknown use case"):
            GenerationRequest.create("poetry", {})

    def test_transcription_is_not_a_generation_request(self):
        """Test transcription goes through transcribe(), not create()."""
        with pytest.raises(RequestValidationError):
            GenerationRequest.create(UseCase.TRANSCRIPTION, {})

    def test_non_mapping_params(self):
        """Test params must be a mapping."""
        with pytest.raises(RequestValidationError):
            GenerationRequest.create(UseCase.QUIZ, ["topic"])


class TestResultModels:
    """Tests for parsed result models."""

    def test_quiz_answer_normalized(self):
        """Test answer keys like ' b) ' are normalized."""
        item = QuizItem(
            question="Q?",
            options={"A": "a", "B": "b", "C": "c", "D": "d"},
            answer=" b) ",
            explanation="",
        )
        assert item.answer == "B"

    def test_feedback_score_clamped(self):
        """Test scores clamp into [0, 10]."""
        comments = {
            "confidence": "",
            "clarity": "",
            "filler_words": "",
            "tone": "",
            "pace": "",
        }
        low = Feedback(
            strengths="", improvements="", overall="", score=-3, soft_skills=comments
        )
        high = Feedback(
            strengths="", improvements="", overall="", score=14, soft_skills=comments
        )
        assert low.score == pytest.approx(0.0)
        assert high.score == pytest.approx(10.0)

    def test_study_plan_week_must_be_positive(self):
        """Test week numbers start at one."""
        with pytest.raises(ValidationError):
            StudyPlanWeek(week=0, topics=["x"], summary="s")

    def test_resume_education_list_joined(self):
        """Test a list of education entries becomes one string."""
        resume = StructuredResume(education=["BSc CS", "MSc AI"])
        assert resume.education == "BSc CS\nMSc AI"
