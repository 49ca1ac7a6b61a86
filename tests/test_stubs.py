"""Tests for degraded stub content."""

from interview_gen.models import UseCase
from interview_gen.request import GenerationRequest
from interview_gen.stubs import (
    DEGRADED_RESPONDERS,
    STUB_FOLLOW_UP_QUESTION,
    follow_up_stub,
    quiz_stub,
)


class TestQuizStub:
    """Tests for quiz_stub."""

    def test_one_item_per_requested_question(self):
        """Test the stub honors num_questions and names the topic."""
        request = GenerationRequest.create(
            UseCase.QUIZ, {"topic": "Recursion", "num_questions": 4}
        )
        items = quiz_stub(request)

        assert len(items) == 4
        assert items[0].question == "Stub Q1: What is Recursion?"
        assert items[3].question == "Stub Q4: What is Recursion?"
        assert items[0].options.A == "Option A"
        assert items[0].options.D == "Option D"
        assert all(item.answer == "A" for item in items)

    def test_default_question_count(self):
        """Test the default five questions."""
        request = GenerationRequest.create(UseCase.QUIZ, {"topic": "SQL"})
        assert len(quiz_stub(request)) == 5


class TestFollowUpStub:
    """Tests for follow_up_stub."""

    def test_generic_follow_up(self):
        """Test the fixed generic follow-up question."""
        request = GenerationRequest.create(
            UseCase.FOLLOW_UP,
            {"last_question": "What is a mutex?", "user_answer": "A lock."},
        )
        assert follow_up_stub(request) == (
            "Can you explain that further or give a real-world example?"
        )
        assert follow_up_stub(request) == STUB_FOLLOW_UP_QUESTION


def test_only_low_stakes_use_cases_have_stubs():
    """Test feedback, study plans and resumes are never stubbed."""
    assert set(DEGRADED_RESPONDERS) == {UseCase.QUIZ, UseCase.FOLLOW_UP}
