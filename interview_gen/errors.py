"""Exception hierarchy for the generation core.

Only ``RequestValidationError`` and ``ExhaustedError`` are meant to reach
callers of ``GenerationService``; ``ProviderCallFailure`` and
``ParseError`` are handled inside the retry and fallback layers.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .error_classifier import ClassifiedError


class GenerationError(Exception):
    """Base class for all generation core errors."""


class RequestValidationError(GenerationError):
    """Raised when request parameters are missing or malformed.

    Attributes:
        use_case: Use case the parameters were meant for
        errors: List of human-readable validation problems
    """

    def __init__(self, use_case: str, errors: Sequence[str]):
        self.use_case = use_case
        self.errors = list(errors)
        super().__init__(
            f"Invalid parameters for '{use_case}': " + "; ".join(self.errors)
        )


class ProviderCallFailure(GenerationError):
    """Exception raised by providers with classification.

    Attributes:
        classified_error: The classified error with category and severity
        original_exception: The original exception that was raised
    """

    def __init__(
        self,
        classified_error: ClassifiedError,
        original_exception: Exception,
    ):
        """Initialize provider call failure.

        Args:
            classified_error: The classified error
            original_exception: The original exception
        """
        self.classified_error = classified_error
        self.original_exception = original_exception
        super().__init__(str(classified_error))

    @property
    def is_retryable(self) -> bool:
        return self.classified_error.is_retryable


class ParseError(GenerationError):
    """Raised when a provider response cannot be turned into the declared schema.

    Attributes:
        raw_excerpt: First characters of the offending response, for debugging
    """

    def __init__(self, message: str, raw_excerpt: Optional[str] = None):
        self.raw_excerpt = raw_excerpt
        super().__init__(message)


@dataclass(frozen=True)
class ProviderFailure:
    """Why one provider in a fallback chain did not produce a result."""

    provider: str
    cause: Exception
    attempts: int

    @property
    def stage(self) -> str:
        return "parse" if isinstance(self.cause, ParseError) else "call"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "stage": self.stage,
            "attempts": self.attempts,
            "error": str(self.cause),
        }


class ExhaustedError(GenerationError):
    """Raised when every provider configured for a use case has failed.

    Attributes:
        use_case: Use case that could not be served
        failures: Per-provider failure causes, in the order they were tried
    """

    def __init__(self, use_case: str, failures: Sequence[ProviderFailure]):
        self.use_case = use_case
        self.failures: List[ProviderFailure] = list(failures)
        if self.failures:
            detail = "; ".join(
                f"{f.provider} ({f.stage}): {f.cause}" for f in self.failures
            )
        else:
            detail = "no providers configured"
        super().__init__(f"All providers failed for '{use_case}': {detail}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "use_case": self.use_case,
            "failures": [f.to_dict() for f in self.failures],
        }
