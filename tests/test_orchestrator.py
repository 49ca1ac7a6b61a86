"""Tests for the fallback orchestrator."""

import logging

import pytest

from interview_gen.errors import ExhaustedError, ParseError
from interview_gen.models import (
    OUTPUT_SCHEMAS,
    Feedback,
    QuizItem,
    SoftSkillMetrics,
    TranscriptResult,
    UseCase,
)
from interview_gen.orchestrator import FallbackOrchestrator, UseCasePolicy
from interview_gen.request import GenerationRequest
from interview_gen.stubs import DEGRADED_RESPONDERS


@pytest.fixture
def feedback_request() -> GenerationRequest:
    """Fixture providing a validated feedback request."""
    return GenerationRequest.create(
        UseCase.FEEDBACK,
        {"answer": "I used a queue.", "question": "Explain BFS.", "job_role": "SWE"},
    )


class TestProviderOrdering:
    """Tests for ordered fallback."""

    def test_first_success_short_circuits(
        self,
        executor,
        text_provider,
        make_spec,
        retryable_error,
        feedback_json,
        feedback_request,
    ):
        """Test A exhausts its budget, B succeeds and C is never invoked."""
        a = text_provider("a", [retryable_error])
        b = text_provider("b", [feedback_json])
        c = text_provider("c", [feedback_json])
        policy = UseCasePolicy(
            use_case=UseCase.FEEDBACK,
            providers=[
                make_spec(a, rank=0, max_retries=1),
                make_spec(b, rank=1),
                make_spec(c, rank=2),
            ],
        )
        orchestrator = FallbackOrchestrator({UseCase.FEEDBACK: policy}, executor)

        result = orchestrator.generate(feedback_request)

        assert result.provider == "b"
        assert result.degraded is False
        assert isinstance(result.value, Feedback)
        assert len(a.calls) == 2
        assert len(b.calls) == 1
        assert c.calls == []
        assert [f.provider for f in result.failures] == ["a"]
        assert result.failures[0].attempts == 2

    def test_rank_decides_order_not_list_position(
        self, executor, text_provider, make_spec, feedback_json, feedback_request
    ):
        """Test providers are tried in ascending rank."""
        first = text_provider("first", [feedback_json])
        second = text_provider("second", [feedback_json])
        policy = UseCasePolicy(
            use_case=UseCase.FEEDBACK,
            providers=[make_spec(second, rank=5), make_spec(first, rank=1)],
        )
        orchestrator = FallbackOrchestrator({UseCase.FEEDBACK: policy}, executor)

        result = orchestrator.generate(feedback_request)

        assert result.provider == "first"
        assert second.calls == []

    def test_parse_failure_moves_to_next_provider(
        self, executor, text_provider, make_spec, feedback_json, feedback_request
    ):
        """Test an unparseable response counts as that provider's failure."""
        garbled = text_provider("garbled", ["I'd rather not answer in JSON."])
        good = text_provider("good", [feedback_json])
        policy = UseCasePolicy(
            use_case=UseCase.FEEDBACK,
            providers=[make_spec(garbled, rank=0, max_retries=2), make_spec(good, rank=1)],
        )
        orchestrator = FallbackOrchestrator({UseCase.FEEDBACK: policy}, executor)

        result = orchestrator.generate(feedback_request)

        assert result.provider == "good"
        # A parse failure is not retried on the same provider
        assert len(garbled.calls) == 1
        assert result.failures[0].stage == "parse"
        assert isinstance(result.failures[0].cause, ParseError)

    def test_fatal_error_skips_remaining_retries(
        self,
        executor,
        text_provider,
        make_spec,
        fatal_error,
        feedback_json,
        feedback_request,
    ):
        """Test an auth failure moves on without spending the retry budget."""
        broken = text_provider("broken", [fatal_error])
        good = text_provider("good", [feedback_json])
        policy = UseCasePolicy(
            use_case=UseCase.FEEDBACK,
            providers=[make_spec(broken, rank=0, max_retries=3), make_spec(good, rank=1)],
        )
        orchestrator = FallbackOrchestrator({UseCase.FEEDBACK: policy}, executor)

        result = orchestrator.generate(feedback_request)

        assert result.provider == "good"
        assert len(broken.calls) == 1

    def test_sampling_settings_reach_provider(
        self, executor, text_provider, make_spec, feedback_json, feedback_request
    ):
        """Test temperature, max tokens and request params are passed through."""
        provider = text_provider("p", [feedback_json])
        policy = UseCasePolicy(
            use_case=UseCase.FEEDBACK,
            providers=[make_spec(provider)],
            temperature=0.2,
            max_tokens=321,
        )
        FallbackOrchestrator({UseCase.FEEDBACK: policy}, executor).generate(
            feedback_request
        )

        params = provider.params[0]
        assert params.temperature == pytest.approx(0.2)
        assert params.max_tokens == 321
        assert params.request_params["job_role"] == "SWE"


class TestExhaustion:
    """Tests for behavior once every provider failed."""

    def test_non_stub_use_case_raises(
        self, executor, text_provider, make_spec, retryable_error, feedback_request
    ):
        """Test feedback never degrades and lists every failure in order."""
        a = text_provider("a", [retryable_error])
        b = text_provider("b", [retryable_error])
        policy = UseCasePolicy(
            use_case=UseCase.FEEDBACK,
            providers=[make_spec(a, rank=0), make_spec(b, rank=1)],
        )
        orchestrator = FallbackOrchestrator({UseCase.FEEDBACK: policy}, executor)

        with pytest.raises(ExhaustedError) as exc_info:
            orchestrator.generate(feedback_request)

        error = exc_info.value
        assert error.use_case == "feedback"
        assert [f.provider for f in error.failures] == ["a", "b"]
        assert "a (call)" in str(error)
        assert error.to_dict()["failures"][1]["provider"] == "b"

    def test_stub_use_case_degrades(
        self, executor, text_provider, make_spec, retryable_error, quiz_params, caplog
    ):
        """Test an exhausted quiz chain returns labeled stub content."""
        a = text_provider("a", [retryable_error])
        policy = UseCasePolicy(
            use_case=UseCase.QUIZ,
            providers=[make_spec(a)],
            degraded_responder=DEGRADED_RESPONDERS[UseCase.QUIZ],
        )
        orchestrator = FallbackOrchestrator({UseCase.QUIZ: policy}, executor)
        request = GenerationRequest.create(UseCase.QUIZ, quiz_params)

        with caplog.at_level(logging.WARNING, logger="interview_gen.orchestrator"):
            result = orchestrator.generate(request)

        assert result.degraded is True
        assert result.provider == "stub"
        assert len(result.value) == 3
        assert all(isinstance(item, QuizItem) for item in result.value)
        assert [f.provider for f in result.failures] == ["a"]
        assert any("stub" in record.getMessage() for record in caplog.records)

    def test_unconfigured_use_case_raises_without_failures(
        self, executor, feedback_request
    ):
        """Test a use case without a policy is exhausted immediately."""
        orchestrator = FallbackOrchestrator({}, executor)

        with pytest.raises(ExhaustedError) as exc_info:
            orchestrator.generate(feedback_request)

        assert exc_info.value.failures == []
        assert "no providers configured" in str(exc_info.value)

    def test_empty_chain_without_stub_raises(self, executor, feedback_request):
        """Test a non-stub use case whose chain is empty raises ExhaustedError."""
        policy = UseCasePolicy(use_case=UseCase.FEEDBACK, providers=[])
        orchestrator = FallbackOrchestrator({UseCase.FEEDBACK: policy}, executor)

        with pytest.raises(ExhaustedError) as exc_info:
            orchestrator.generate(feedback_request)

        assert exc_info.value.failures == []

    @pytest.mark.parametrize(
        "use_case,params",
        [
            (UseCase.QUIZ, {"topic": "Python", "num_questions": 2}),
            (
                UseCase.FOLLOW_UP,
                {"last_question": "What is a mutex?", "user_answer": "A kind of lock."},
            ),
        ],
    )
    def test_empty_chain_with_stub_degrades(self, executor, use_case, params):
        """Test a stub use case with no usable providers serves its stub."""
        policy = UseCasePolicy(
            use_case=use_case,
            providers=[],
            degraded_responder=DEGRADED_RESPONDERS[use_case],
        )
        orchestrator = FallbackOrchestrator({use_case: policy}, executor)

        result = orchestrator.generate(GenerationRequest.create(use_case, params))

        assert result.degraded is True
        assert result.provider == "stub"
        assert result.failures == []


class TestQuestionsLimit:
    """Tests for the question-count limit applied to list output."""

    def test_extra_questions_are_dropped(
        self, executor, text_provider, make_spec, questions_params
    ):
        """Test a 10-minute interview keeps at most five questions."""
        raw = "\n".join(f"{n}. Question {n}?" for n in range(1, 9))
        provider = text_provider("p", [raw])
        policy = UseCasePolicy(use_case=UseCase.QUESTIONS, providers=[make_spec(provider)])
        orchestrator = FallbackOrchestrator({UseCase.QUESTIONS: policy}, executor)

        result = orchestrator.generate(
            GenerationRequest.create(UseCase.QUESTIONS, questions_params)
        )

        assert result.value == [f"{n}. Question {n}?" for n in range(1, 6)]


class TestTranscribe:
    """Tests for the transcription chain."""

    def test_falls_back_to_second_provider(
        self, executor, transcription_provider, make_spec, retryable_error
    ):
        """Test Whisper failing hands the audio to the next provider."""
        metrics = SoftSkillMetrics(
            filler_word_count=2, average_word_confidence=0.9, speaking_rate=2.5
        )
        whisper = transcription_provider("whisper", [retryable_error])
        assembly = transcription_provider(
            "assemblyai", [TranscriptResult(text="Hello there", soft_skills=metrics)]
        )
        policy = UseCasePolicy(
            use_case=UseCase.TRANSCRIPTION,
            providers=[make_spec(whisper, rank=0), make_spec(assembly, rank=1)],
        )
        orchestrator = FallbackOrchestrator({UseCase.TRANSCRIPTION: policy}, executor)

        result = orchestrator.transcribe(b"RIFF....")

        assert result.provider == "assemblyai"
        assert result.value.text == "Hello there"
        assert result.value.soft_skills.filler_word_count == 2
        assert whisper.calls == [b"RIFF...."]

    def test_empty_transcript_is_a_parse_failure(
        self, executor, transcription_provider, make_spec
    ):
        """Test an empty transcript does not count as success."""
        whisper = transcription_provider("whisper", [TranscriptResult(text="  ")])
        policy = UseCasePolicy(
            use_case=UseCase.TRANSCRIPTION, providers=[make_spec(whisper)]
        )
        orchestrator = FallbackOrchestrator({UseCase.TRANSCRIPTION: policy}, executor)

        with pytest.raises(ExhaustedError) as exc_info:
            orchestrator.transcribe(b"audio")

        assert exc_info.value.failures[0].stage == "parse"


def test_output_schemas_cover_every_use_case():
    """Test every use case declares an output shape."""
    assert set(OUTPUT_SCHEMAS) == set(UseCase)
