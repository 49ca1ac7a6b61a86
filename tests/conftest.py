"""Pytest configuration and shared fixtures for generation core tests."""

from pathlib import Path
from typing import Any, Callable, List, Sequence

import pytest

from interview_gen.error_classifier import (
    ClassifiedError,
    ErrorCategory,
    ErrorSeverity,
)
from interview_gen.errors import ProviderCallFailure
from interview_gen.infrastructure.retry import RetryConfig, RetryExecutor
from interview_gen.models import TranscriptResult
from interview_gen.providers.base import (
    BaseTextProvider,
    BaseTranscriptionProvider,
    InvokeParams,
    ProviderSpec,
)

REPO_ROOT = Path(__file__).resolve().parent.parent


class ScriptedTextProvider(BaseTextProvider):
    """Text provider that replays a fixed script of responses.

    Each script entry is either a string (returned) or an exception
    (raised). The last entry repeats once the script runs out.
    """

    def __init__(self, name: str, script: Sequence[Any]):
        super().__init__(model=f"{name}-model", timeout=10.0)
        self.provider_name = name
        self.script = list(script)
        self.calls: List[str] = []
        self.params: List[InvokeParams] = []

    def invoke(self, prompt: str, params: InvokeParams) -> str:
        self.calls.append(prompt)
        self.params.append(params)
        index = min(len(self.calls) - 1, len(self.script) - 1)
        item = self.script[index]
        if isinstance(item, Exception):
            raise item
        return item


class ScriptedTranscriptionProvider(BaseTranscriptionProvider):
    """Transcription provider that replays a fixed script."""

    def __init__(self, name: str, script: Sequence[Any]):
        super().__init__(model=f"{name}-model", timeout=10.0)
        self.provider_name = name
        self.script = list(script)
        self.calls: List[bytes] = []

    def invoke(self, audio: bytes, params: InvokeParams) -> TranscriptResult:
        self.calls.append(audio)
        item = self.script[min(len(self.calls) - 1, len(self.script) - 1)]
        if isinstance(item, Exception):
            raise item
        return item


def _failure(category: ErrorCategory, retryable: bool, message: str) -> ProviderCallFailure:
    return ProviderCallFailure(
        classified_error=ClassifiedError(
            category=category,
            severity=ErrorSeverity.MEDIUM,
            provider="test",
            original_error="TestError",
            message=message,
            is_retryable=retryable,
        ),
        original_exception=Exception(message),
    )


@pytest.fixture
def retryable_error() -> ProviderCallFailure:
    """Fixture providing a transient (server error) provider failure."""
    return _failure(ErrorCategory.SERVER_ERROR, True, "Internal server error")


@pytest.fixture
def fatal_error() -> ProviderCallFailure:
    """Fixture providing a permanent (authentication) provider failure."""
    return _failure(ErrorCategory.AUTHENTICATION, False, "Invalid API key")


@pytest.fixture
def sleeps() -> List[float]:
    """Fixture collecting the delays an executor would have slept."""
    return []


@pytest.fixture
def executor(sleeps) -> RetryExecutor:
    """Retry executor that records delays instead of sleeping."""
    return RetryExecutor(sleep=sleeps.append, rng=lambda a, b: 0.0)


@pytest.fixture
def text_provider() -> Callable[[str, Sequence[Any]], ScriptedTextProvider]:
    """Factory fixture for scripted text providers."""
    return ScriptedTextProvider


@pytest.fixture
def transcription_provider() -> Callable[[str, Sequence[Any]], ScriptedTranscriptionProvider]:
    """Factory fixture for scripted transcription providers."""
    return ScriptedTranscriptionProvider


@pytest.fixture
def make_spec() -> Callable[..., ProviderSpec]:
    """Factory fixture wrapping a provider into a ProviderSpec."""

    def _make(provider, rank: int = 0, max_retries: int = 0, **retry_kwargs) -> ProviderSpec:
        return ProviderSpec(
            name=provider.name,
            rank=rank,
            provider=provider,
            retry=RetryConfig(max_retries=max_retries, **retry_kwargs),
        )

    return _make


@pytest.fixture
def policies_path() -> Path:
    """Path of the default policy configuration shipped with the repo."""
    return REPO_ROOT / "config" / "policies.yaml"


@pytest.fixture
def quiz_json() -> str:
    """Fixture providing a fenced single-item quiz response."""
    return (
        "```json\n"
        '[{"question":"What is 2+2?","options":{"A":"3","B":"4","C":"5","D":"6"},'
        '"answer":"B","explanation":"Basic addition."}]\n'
        "```"
    )


@pytest.fixture
def feedback_json() -> str:
    """Fixture providing a well-formed feedback response."""
    return (
        '{"strengths":"Clear structure","improvements":"Add metrics",'
        '"overall":"Solid answer","score":7.5,'
        '"soft_skills":{"confidence":"High","clarity":"Good",'
        '"filler_words":"Few","tone":"Professional","pace":"Steady"}}'
    )


@pytest.fixture
def quiz_params() -> dict:
    """Fixture providing valid quiz request parameters."""
    return {"topic": "Python", "num_questions": 3}


@pytest.fixture
def questions_params() -> dict:
    """Fixture providing valid mock-interview question parameters."""
    return {
        "mock_type": "Subject",
        "role_or_subject": "Computer Science",
        "subjects_or_topics": ["Data Structures", "Algorithms"],
        "companies": ["Amazon"],
        "duration": 10,
    }
