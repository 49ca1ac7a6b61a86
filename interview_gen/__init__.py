"""Resilient multi-provider generation core for interview preparation."""

from .config import Settings
from .errors import (
    ExhaustedError,
    GenerationError,
    ParseError,
    ProviderCallFailure,
    RequestValidationError,
)
from .factory import build_orchestrator, build_service
from .models import GenerationResult, UseCase
from .orchestrator import FallbackOrchestrator, UseCasePolicy
from .request import GenerationRequest
from .service import GenerationService, extract_personal_info

__version__ = "0.1.0"

__all__ = [
    "ExhaustedError",
    "FallbackOrchestrator",
    "GenerationError",
    "GenerationRequest",
    "GenerationResult",
    "GenerationService",
    "ParseError",
    "ProviderCallFailure",
    "RequestValidationError",
    "Settings",
    "UseCase",
    "UseCasePolicy",
    "build_orchestrator",
    "build_service",
    "extract_personal_info",
]
