"""Error classification for provider API failures.

This module classifies exceptions raised by generation and transcription
providers so the retry layer can tell transient failures (rate limits,
timeouts, 5xx responses) from permanent ones (bad credentials, exhausted
quota, malformed requests).
"""

import re
from enum import Enum
from typing import Any, Optional

import httpx


class ErrorCategory(Enum):
    """Categories of API errors."""

    BILLING_QUOTA = "billing_quota"  # Insufficient funds, quota exceeded
    RATE_LIMIT = "rate_limit"  # Rate limit/throttling errors
    AUTHENTICATION = "authentication"  # API key invalid or expired
    INVALID_REQUEST = "invalid_request"  # Malformed request or invalid parameters
    SERVER_ERROR = "server_error"  # Provider server errors (5xx)
    NETWORK_ERROR = "network_error"  # Connection/timeout errors
    MODEL_ERROR = "model_error"  # Model not found or unavailable
    UNKNOWN = "unknown"  # Unclassified errors


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    CRITICAL = "critical"  # Requires immediate attention (e.g., billing)
    HIGH = "high"  # Important but not blocking (e.g., rate limits)
    MEDIUM = "medium"  # Should be addressed (e.g., invalid requests)
    LOW = "low"  # Informational (e.g., temporary network issues)


class ClassifiedError:
    """A classified API error with category and severity."""

    def __init__(
        self,
        category: ErrorCategory,
        severity: ErrorSeverity,
        provider: str,
        original_error: str,
        message: str,
        is_retryable: bool = False,
        status_code: Optional[int] = None,
    ):
        """Initialize classified error.

        Args:
            category: Error category
            severity: Error severity level
            provider: Provider name (openai, google, cohere, ...)
            original_error: Original error type name
            message: Human-readable error message
            is_retryable: Whether the error is transient and retryable
            status_code: HTTP status code when the provider returned one
        """
        self.category = category
        self.severity = severity
        self.provider = provider
        self.original_error = original_error
        self.message = message
        self.is_retryable = is_retryable
        self.status_code = status_code

    def __str__(self) -> str:
        """String representation of classified error."""
        return (
            f"[{self.severity.value.upper()}] {self.provider}: "
            f"{self.category.value} - {self.message}"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "provider": self.provider,
            "original_error": self.original_error,
            "message": self.message,
            "is_retryable": self.is_retryable,
            "status_code": self.status_code,
        }


class ErrorClassifier:
    """Classifies API errors from the supported providers."""

    # Patterns for billing/quota errors
    BILLING_PATTERNS = [
        r"insufficient.*funds",
        r"quota.*exceeded",
        r"billing.*issue",
        r"insufficient.*quota",
        r"credit.*balance",
        r"payment.*required",
        r"account.*suspended",
        r"\b402\b",
    ]

    # Patterns for rate limit errors
    RATE_LIMIT_PATTERNS = [
        r"rate.*limit",
        r"too.*many.*requests",
        r"throttl",
        r"\b429\b",
        r"requests.*per.*minute",
        r"resource.*exhausted",
    ]

    # Patterns for authentication errors
    AUTH_PATTERNS = [
        r"invalid.*api.*key",
        r"authentication.*failed",
        r"unauthorized",
        r"api.*key.*expired",
        r"api.*key.*not.*valid",
        r"\b401\b",
        r"\b403\b",
        r"invalid.*credentials",
    ]

    # Patterns for model errors
    MODEL_PATTERNS = [
        r"model.*not.*found",
        r"invalid.*model",
        r"model.*unavailable",
        r"model.*deprecated",
    ]

    # Patterns for server errors
    SERVER_ERROR_PATTERNS = [
        r"internal.*server.*error",
        r"service.*unavailable",
        r"\b50[0-9]\b",
        r"server.*error",
        r"upstream.*error",
        r"overloaded",
    ]

    # Patterns for network errors
    NETWORK_PATTERNS = [
        r"connection.*error",
        r"timeout",
        r"timed?\s*out",
        r"network.*error",
        r"connection.*refused",
        r"connection.*reset",
        r"dns.*error",
        r"polling.*timeout",
    ]

    @staticmethod
    def classify_error(
        error: Exception,
        provider: str,
    ) -> ClassifiedError:
        """Classify an API error.

        The HTTP status code is used when the exception carries one;
        otherwise the error message is matched against known patterns.

        Args:
            error: The exception that was raised
            provider: Provider name (openai, google, cohere, whisper, assemblyai)

        Returns:
            ClassifiedError with category and severity
        """
        error_type = type(error).__name__

        if isinstance(error, httpx.TimeoutException):
            return ErrorClassifier._network_error(provider, error_type)

        status_code = ErrorClassifier.extract_status_code(error)
        if status_code is not None:
            by_status = ErrorClassifier._classify_status_code(
                status_code, provider, error_type
            )
            if by_status is not None:
                return by_status

        if isinstance(error, httpx.TransportError):
            return ErrorClassifier._network_error(provider, error_type)

        return ErrorClassifier._classify_message(
            str(error).lower(), provider, error_type
        )

    @staticmethod
    def extract_status_code(error: Exception) -> Optional[int]:
        """Pull an HTTP status code off SDK or httpx exceptions.

        Args:
            error: The exception that was raised

        Returns:
            Integer status code, or None when the error has none
        """
        status: Any = getattr(error, "status_code", None)
        if status is None:
            response = getattr(error, "response", None)
            status = getattr(response, "status_code", None)
        if status is None:
            status = getattr(error, "code", None)
        if isinstance(status, int) and 100 <= status <= 599:
            return status
        return None

    @staticmethod
    def _classify_status_code(
        status_code: int, provider: str, error_type: str
    ) -> Optional[ClassifiedError]:
        """Classify purely on HTTP status; None for codes without a rule."""
        if status_code == 402:
            return ErrorClassifier._billing_error(provider, error_type, status_code)
        if status_code in (401, 403):
            return ErrorClassifier._auth_error(provider, error_type, status_code)
        if status_code == 429:
            return ErrorClassifier._rate_limit_error(provider, error_type, status_code)
        if status_code == 404:
            return ClassifiedError(
                category=ErrorCategory.MODEL_ERROR,
                severity=ErrorSeverity.MEDIUM,
                provider=provider,
                original_error=error_type,
                message=f"Model or endpoint not found at {provider}. Verify model name.",
                is_retryable=False,
                status_code=status_code,
            )
        if status_code == 408:
            return ErrorClassifier._network_error(provider, error_type, status_code)
        if status_code >= 500:
            return ErrorClassifier._server_error(provider, error_type, status_code)
        if 400 <= status_code < 500:
            return ClassifiedError(
                category=ErrorCategory.INVALID_REQUEST,
                severity=ErrorSeverity.MEDIUM,
                provider=provider,
                original_error=error_type,
                message=f"Invalid request to {provider}. Check request parameters.",
                is_retryable=False,
                status_code=status_code,
            )
        return None

    @staticmethod
    def _classify_message(
        error_str: str, provider: str, error_type: str
    ) -> ClassifiedError:
        """Classify an error by matching its message against known patterns."""
        # Check for billing/quota errors (CRITICAL)
        if ErrorClassifier._match_patterns(error_str, ErrorClassifier.BILLING_PATTERNS):
            return ErrorClassifier._billing_error(provider, error_type)

        # Check for authentication errors (CRITICAL)
        if ErrorClassifier._match_patterns(error_str, ErrorClassifier.AUTH_PATTERNS):
            return ErrorClassifier._auth_error(provider, error_type)

        # Check for rate limit errors (HIGH - retryable)
        if ErrorClassifier._match_patterns(
            error_str, ErrorClassifier.RATE_LIMIT_PATTERNS
        ):
            return ErrorClassifier._rate_limit_error(provider, error_type)

        # Check for model errors (MEDIUM)
        if ErrorClassifier._match_patterns(error_str, ErrorClassifier.MODEL_PATTERNS):
            return ClassifiedError(
                category=ErrorCategory.MODEL_ERROR,
                severity=ErrorSeverity.MEDIUM,
                provider=provider,
                original_error=error_type,
                message=f"Model configuration issue with {provider}. Verify model name/availability.",
                is_retryable=False,
            )

        # Check for server errors (MEDIUM - retryable)
        if ErrorClassifier._match_patterns(
            error_str, ErrorClassifier.SERVER_ERROR_PATTERNS
        ):
            return ErrorClassifier._server_error(provider, error_type)

        # Check for network errors (LOW - retryable)
        if ErrorClassifier._match_patterns(error_str, ErrorClassifier.NETWORK_PATTERNS):
            return ErrorClassifier._network_error(provider, error_type)

        # Check for invalid request errors
        if (
            "invalid" in error_str
            or "bad request" in error_str
            or re.search(r"\b400\b", error_str)
        ):
            return ClassifiedError(
                category=ErrorCategory.INVALID_REQUEST,
                severity=ErrorSeverity.MEDIUM,
                provider=provider,
                original_error=error_type,
                message=f"Invalid request to {provider}. Check request parameters.",
                is_retryable=False,
            )

        # Unclassified errors keep the retry-everything behavior
        return ClassifiedError(
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.MEDIUM,
            provider=provider,
            original_error=error_type,
            message=f"Unclassified error from {provider}: {error_str[:100]}",
            is_retryable=True,
        )

    @staticmethod
    def _billing_error(
        provider: str, error_type: str, status_code: Optional[int] = None
    ) -> ClassifiedError:
        return ClassifiedError(
            category=ErrorCategory.BILLING_QUOTA,
            severity=ErrorSeverity.CRITICAL,
            provider=provider,
            original_error=error_type,
            message=(
                f"Billing or quota issue detected. Please check your {provider} "
                f"account balance and usage limits."
            ),
            is_retryable=False,
            status_code=status_code,
        )

    @staticmethod
    def _auth_error(
        provider: str, error_type: str, status_code: Optional[int] = None
    ) -> ClassifiedError:
        return ClassifiedError(
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.CRITICAL,
            provider=provider,
            original_error=error_type,
            message=(
                f"Authentication failed. Please verify your {provider} API key "
                f"is valid and has not expired."
            ),
            is_retryable=False,
            status_code=status_code,
        )

    @staticmethod
    def _rate_limit_error(
        provider: str, error_type: str, status_code: Optional[int] = None
    ) -> ClassifiedError:
        return ClassifiedError(
            category=ErrorCategory.RATE_LIMIT,
            severity=ErrorSeverity.HIGH,
            provider=provider,
            original_error=error_type,
            message=f"Rate limit exceeded for {provider}. Consider reducing request frequency.",
            is_retryable=True,
            status_code=status_code,
        )

    @staticmethod
    def _server_error(
        provider: str, error_type: str, status_code: Optional[int] = None
    ) -> ClassifiedError:
        return ClassifiedError(
            category=ErrorCategory.SERVER_ERROR,
            severity=ErrorSeverity.MEDIUM,
            provider=provider,
            original_error=error_type,
            message=f"{provider} server error. This may be temporary.",
            is_retryable=True,
            status_code=status_code,
        )

    @staticmethod
    def _network_error(
        provider: str, error_type: str, status_code: Optional[int] = None
    ) -> ClassifiedError:
        return ClassifiedError(
            category=ErrorCategory.NETWORK_ERROR,
            severity=ErrorSeverity.LOW,
            provider=provider,
            original_error=error_type,
            message="Network connectivity issue. This may be temporary.",
            is_retryable=True,
            status_code=status_code,
        )

    @staticmethod
    def _match_patterns(text: str, patterns: list[str]) -> bool:
        """Check if text matches any of the given regex patterns.

        Args:
            text: Text to search
            patterns: List of regex patterns

        Returns:
            True if any pattern matches
        """
        for pattern in patterns:
            if re.search(pattern, text, re.IGNORECASE):
                return True
        return False
