"""Bounded retry with exponential backoff for a single provider.

A provider call is attempted at most ``max_retries + 1`` times. Only
``ProviderCallFailure`` is handled here; any other exception is a bug
and propagates. Failures the error classifier marks as permanent
(bad credentials, exhausted quota, malformed request) end the loop
immediately when ``classify_fatal`` is on.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

from ..errors import ProviderCallFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 2
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 8.0
DEFAULT_JITTER = 0.5
DEFAULT_EXPONENTIAL_BASE = 2.0


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_retries: Retries after the first attempt (0 means one attempt)
        base_delay: Delay before the first retry, in seconds
        max_delay: Cap on the exponential part of the delay
        jitter: Upper bound of the uniform random delay added on top
        exponential_base: Growth factor between consecutive delays
        classify_fatal: Stop retrying on errors classified as permanent
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    jitter: float = DEFAULT_JITTER
    exponential_base: float = DEFAULT_EXPONENTIAL_BASE
    classify_fatal: bool = True

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0 or self.max_delay < 0 or self.jitter < 0:
            raise ValueError("delays and jitter must be >= 0")


def calculate_backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    jitter: float = DEFAULT_JITTER,
    exponential_base: float = DEFAULT_EXPONENTIAL_BASE,
    rng: Optional[Callable[[float, float], float]] = None,
) -> float:
    """Calculate the delay before the next attempt.

    Args:
        attempt: Zero-based index of the attempt that just failed
        base_delay: Base delay in seconds
        max_delay: Cap on the exponential component
        jitter: Upper bound of the random component
        exponential_base: Base for the exponential calculation
        rng: ``uniform(a, b)``-style callable, defaults to random.uniform

    Returns:
        min(base_delay * exponential_base ** attempt, max_delay) + U(0, jitter)
    """
    uniform = rng or random.uniform
    delay = min(base_delay * (exponential_base**attempt), max_delay)
    if jitter > 0:
        delay += uniform(0, jitter)
    return delay


@dataclass(frozen=True)
class Success(Generic[T]):
    """The call returned a payload."""

    payload: T
    attempts: int


@dataclass(frozen=True)
class RetryableFailure:
    """Every attempt failed with a transient error; retry budget spent."""

    cause: ProviderCallFailure
    attempts: int


@dataclass(frozen=True)
class FatalFailure:
    """An attempt failed with an error that retrying cannot fix."""

    cause: ProviderCallFailure
    attempts: int


AttemptOutcome = Union[Success, RetryableFailure, FatalFailure]


class RetryExecutor:
    """Runs one provider call under a RetryConfig.

    The executor keeps no state between calls; ``sleep`` and ``rng``
    can be injected so tests run without real delays.
    """

    def __init__(
        self,
        sleep: Optional[Callable[[float], None]] = None,
        rng: Optional[Callable[[float, float], float]] = None,
    ):
        self._sleep = sleep
        self._rng = rng

    def execute(
        self,
        call: Callable[[], T],
        config: RetryConfig,
        provider_name: str = "unknown",
    ) -> AttemptOutcome:
        """Invoke ``call`` until it succeeds or the retry budget runs out.

        Args:
            call: Zero-argument provider invocation
            config: Retry budget and backoff parameters
            provider_name: Name used in log messages

        Returns:
            Success, RetryableFailure or FatalFailure
        """
        last_error: Optional[ProviderCallFailure] = None
        total_attempts = config.max_retries + 1

        for attempt in range(total_attempts):
            try:
                payload = call()
            except ProviderCallFailure as e:
                last_error = e
                attempts = attempt + 1

                if config.classify_fatal and not e.is_retryable:
                    logger.warning(
                        f"Non-retryable error from {provider_name} "
                        f"({e.classified_error.category.value}), giving up after "
                        f"{attempts} attempt(s)"
                    )
                    return FatalFailure(cause=e, attempts=attempts)

                if attempts >= total_attempts:
                    break

                delay = calculate_backoff_delay(
                    attempt=attempt,
                    base_delay=config.base_delay,
                    max_delay=config.max_delay,
                    jitter=config.jitter,
                    exponential_base=config.exponential_base,
                    rng=self._rng,
                )
                logger.warning(
                    f"Attempt {attempts}/{total_attempts} for {provider_name} failed "
                    f"({e.classified_error.category.value}). "
                    f"Retrying in {delay:.2f}s..."
                )
                (self._sleep or time.sleep)(delay)
                continue

            if attempt > 0:
                logger.info(
                    f"{provider_name} succeeded on attempt {attempt + 1}/{total_attempts}"
                )
            return Success(payload=payload, attempts=attempt + 1)

        assert last_error is not None
        logger.warning(
            f"All {total_attempts} attempt(s) for {provider_name} exhausted: {last_error}"
        )
        return RetryableFailure(cause=last_error, attempts=total_attempts)
