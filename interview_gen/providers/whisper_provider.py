"""OpenAI Whisper speech-to-text provider."""

import httpx
import openai
from openai import OpenAI

from ..models import TranscriptResult
from .base import BaseTranscriptionProvider, InvokeParams

AUDIO_FILENAME = "audio.wav"
AUDIO_CONTENT_TYPE = "audio/wav"


class WhisperProvider(BaseTranscriptionProvider):
    """Transcribes audio with OpenAI's ``audio.transcriptions`` endpoint.

    Whisper returns plain text only, so no soft-skill metrics are computed.
    """

    def __init__(self, api_key: str, model: str = "whisper-1", timeout: float = 20.0):
        super().__init__(model, timeout)
        self.client = OpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
            http_client=httpx.Client(timeout=timeout, follow_redirects=False),
        )

    def invoke(self, audio: bytes, params: InvokeParams) -> TranscriptResult:
        try:
            response = self.client.audio.transcriptions.create(
                model=self.model,
                file=(AUDIO_FILENAME, audio, AUDIO_CONTENT_TYPE),
            )
        except openai.OpenAIError as e:
            raise self._handle_api_error(e)

        text = getattr(response, "text", None)
        if text is None:
            raise self._malformed_response("Whisper response has no text")
        return TranscriptResult(text=text, soft_skills=None)
