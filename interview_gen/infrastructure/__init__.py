"""Retry infrastructure shared by all provider chains."""

from .retry import (
    AttemptOutcome,
    FatalFailure,
    RetryableFailure,
    RetryConfig,
    RetryExecutor,
    Success,
    calculate_backoff_delay,
)

__all__ = [
    "AttemptOutcome",
    "FatalFailure",
    "RetryableFailure",
    "RetryConfig",
    "RetryExecutor",
    "Success",
    "calculate_backoff_delay",
]
