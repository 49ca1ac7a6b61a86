"""Generation and transcription provider integrations."""

from .assemblyai_provider import AssemblyAIProvider
from .base import (
    BaseTextProvider,
    BaseTranscriptionProvider,
    InvokeParams,
    ProviderSpec,
)
from .cohere_provider import CohereProvider
from .google_provider import GoogleProvider
from .openai_provider import OpenAIProvider
from .regex_resume import RegexResumeProvider
from .whisper_provider import WhisperProvider

__all__ = [
    "AssemblyAIProvider",
    "BaseTextProvider",
    "BaseTranscriptionProvider",
    "CohereProvider",
    "GoogleProvider",
    "InvokeParams",
    "OpenAIProvider",
    "ProviderSpec",
    "RegexResumeProvider",
    "WhisperProvider",
]
