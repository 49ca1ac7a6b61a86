"""Base classes for generation and transcription providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional, Union

from ..error_classifier import (
    ClassifiedError,
    ErrorCategory,
    ErrorClassifier,
    ErrorSeverity,
)
from ..errors import ProviderCallFailure
from ..infrastructure.retry import RetryConfig
from ..models import TranscriptResult

DEFAULT_TIMEOUT_SECONDS = 15.0
MIN_TIMEOUT_SECONDS = 10.0
MAX_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class InvokeParams:
    """Per-request sampling settings handed to a provider.

    Attributes:
        temperature: Sampling temperature
        max_tokens: Maximum number of tokens to generate
        request_params: The validated request parameters, for providers
            that work from them directly instead of from the prompt
    """

    temperature: float = 0.7
    max_tokens: int = 1000
    request_params: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )


class BaseProvider(ABC):
    """Behavior shared by every provider adapter."""

    capability: ClassVar[str] = ""
    provider_name: ClassVar[Optional[str]] = None

    def __init__(self, model: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        """
        Initialize the provider.

        Args:
            model: Model identifier to use
            timeout: Per-call timeout in seconds
        """
        self.model = model
        self.timeout = timeout

    @property
    def name(self) -> str:
        return self.get_provider_name()

    def get_provider_name(self) -> str:
        """
        Get the name of this provider.

        Returns:
            Provider name (e.g., "openai", "google", "cohere")
        """
        if self.provider_name:
            return self.provider_name
        return self.__class__.__name__.replace("Provider", "").lower()

    def _handle_api_error(self, error: Exception) -> ProviderCallFailure:
        """Classify and wrap an API error.

        Args:
            error: The exception that was raised

        Returns:
            ProviderCallFailure with classified error
        """
        classified = ErrorClassifier.classify_error(
            error=error,
            provider=self.get_provider_name(),
        )
        return ProviderCallFailure(
            classified_error=classified,
            original_exception=error,
        )

    def _malformed_response(self, detail: str) -> ProviderCallFailure:
        """Wrap a response that arrived but lacks the expected content.

        Treated like a server error, so it is retried.
        """
        classified = ClassifiedError(
            category=ErrorCategory.SERVER_ERROR,
            severity=ErrorSeverity.MEDIUM,
            provider=self.get_provider_name(),
            original_error="MalformedResponse",
            message=detail,
            is_retryable=True,
        )
        return ProviderCallFailure(
            classified_error=classified,
            original_exception=ValueError(detail),
        )


class BaseTextProvider(BaseProvider):
    """Abstract base class for text generation providers."""

    capability: ClassVar[str] = "text"

    @abstractmethod
    def invoke(self, prompt: str, params: InvokeParams) -> str:
        """
        Generate a completion for a prompt.

        Args:
            prompt: The prompt to send to the model
            params: Sampling settings and request parameters

        Returns:
            The raw generated text

        Raises:
            ProviderCallFailure: If the call fails
        """


class BaseTranscriptionProvider(BaseProvider):
    """Abstract base class for speech-to-text providers."""

    capability: ClassVar[str] = "transcription"

    @abstractmethod
    def invoke(self, audio: bytes, params: InvokeParams) -> TranscriptResult:
        """
        Transcribe recorded audio.

        Args:
            audio: Raw audio bytes
            params: Request settings (unused by most providers)

        Returns:
            Transcript, with soft-skill metrics when available

        Raises:
            ProviderCallFailure: If the call fails
        """


Provider = Union[BaseTextProvider, BaseTranscriptionProvider]


@dataclass(frozen=True)
class ProviderSpec:
    """One entry of a use case's fallback chain.

    Attributes:
        name: Provider name used in logs and results
        rank: Position in the chain; lower ranks are tried first
        provider: Configured adapter
        retry: Retry budget for this provider in this chain
    """

    name: str
    rank: int
    provider: Provider
    retry: RetryConfig = field(default_factory=RetryConfig)
