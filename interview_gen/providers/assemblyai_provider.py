"""AssemblyAI speech-to-text provider with soft-skill metrics.

Transcription is asynchronous on AssemblyAI's side: the audio is
uploaded once, a transcript job is submitted once, and the job is then
polled with a growing interval until it completes, fails, or the poll
budget runs out.
"""

import logging
import string
import time
from typing import Any, Callable, Dict, Optional, Sequence

import httpx

from ..models import SoftSkillMetrics, TranscriptResult
from .base import DEFAULT_TIMEOUT_SECONDS, BaseTranscriptionProvider, InvokeParams

logger = logging.getLogger(__name__)

ASSEMBLYAI_API_BASE = "https://api.assemblyai.com/v2"

DEFAULT_POLL_ATTEMPTS = 10
DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_POLL_BACKOFF = 1.0

FILLER_WORDS = frozenset({"um", "uh", "like", "so", "actually"})
FILLER_BIGRAMS = frozenset({("you", "know")})

_PUNCTUATION = str.maketrans("", "", string.punctuation)


def _normalize_token(token: Any) -> str:
    if not isinstance(token, str):
        return ""
    return token.translate(_PUNCTUATION).strip().lower()


def count_filler_words(tokens: Sequence[str]) -> int:
    """Count filler words and filler phrases in normalized tokens."""
    count = sum(1 for token in tokens if token in FILLER_WORDS)
    count += sum(
        1 for pair in zip(tokens, tokens[1:]) if pair in FILLER_BIGRAMS
    )
    return count


def compute_soft_skill_metrics(
    words: Sequence[Dict[str, Any]], audio_duration: Optional[float]
) -> SoftSkillMetrics:
    """Compute delivery metrics from word-level transcript tokens.

    Args:
        words: Word tokens with "text" and "confidence" keys
        audio_duration: Length of the recording in seconds, if known

    Returns:
        Filler word count, average confidence and words per second
    """
    tokens = [_normalize_token(word.get("text")) for word in words]

    average_confidence = None
    if words:
        total = sum(float(word.get("confidence") or 0.0) for word in words)
        average_confidence = round(total / len(words), 2)

    speaking_rate = None
    if audio_duration:
        speaking_rate = round(len(words) / float(audio_duration), 2)

    return SoftSkillMetrics(
        filler_word_count=count_filler_words(tokens),
        average_word_confidence=average_confidence,
        speaking_rate=speaking_rate,
    )


class AssemblyAIProvider(BaseTranscriptionProvider):
    """AssemblyAI integration: upload, submit, poll."""

    def __init__(
        self,
        api_key: str,
        model: str = "best",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        poll_attempts: int = DEFAULT_POLL_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_backoff: float = DEFAULT_POLL_BACKOFF,
        http_client: Optional[httpx.Client] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize AssemblyAI provider.

        Args:
            api_key: AssemblyAI API key
            model: Speech model tier
            timeout: Per-request timeout in seconds
            poll_attempts: Maximum number of status polls
            poll_interval: Base wait between polls in seconds
            poll_backoff: Extra wait added per poll already made
            http_client: Preconfigured client, mainly for tests
            sleep: Sleep function, defaults to time.sleep
        """
        super().__init__(model, timeout)
        self.poll_attempts = poll_attempts
        self.poll_interval = poll_interval
        self.poll_backoff = poll_backoff
        self._sleep = sleep
        self.client = http_client or httpx.Client(
            base_url=ASSEMBLYAI_API_BASE,
            timeout=timeout,
            follow_redirects=False,
        )
        self._headers = {"authorization": api_key}

    def invoke(self, audio: bytes, params: InvokeParams) -> TranscriptResult:
        """
        Transcribe audio and compute soft-skill metrics.

        Raises:
            ProviderCallFailure: On HTTP errors, a failed job, or when the
                job is still running after the last poll
        """
        try:
            upload_url = self._upload(audio)
            transcript_id = self._submit(upload_url)
            transcript = self._poll(transcript_id)
        except httpx.HTTPError as e:
            raise self._handle_api_error(e)

        words = transcript.get("words") or []
        soft_skills = None
        if words:
            soft_skills = compute_soft_skill_metrics(
                words, transcript.get("audio_duration")
            )
        return TranscriptResult(
            text=transcript.get("text") or "", soft_skills=soft_skills
        )

    def _post_json(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        response = self.client.post(
            path, headers=self._headers, timeout=self.timeout, **kwargs
        )
        response.raise_for_status()
        return self._json_body(response)

    def _json_body(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            raise self._malformed_response("AssemblyAI returned a non-JSON body")
        if not isinstance(body, dict):
            raise self._malformed_response("AssemblyAI returned an unexpected body")
        return body

    def _upload(self, audio: bytes) -> str:
        body = self._post_json("/upload", content=audio)
        upload_url = body.get("upload_url")
        if not upload_url:
            raise self._malformed_response("AssemblyAI upload returned no URL")
        logger.debug("AssemblyAI upload complete")
        return upload_url

    def _submit(self, upload_url: str) -> str:
        body = self._post_json(
            "/transcript",
            json={
                "audio_url": upload_url,
                "speech_model": self.model,
                "disfluencies": True,
                "speaker_labels": False,
                "language_code": "en_us",
                "punctuate": True,
                "format_text": True,
            },
        )
        transcript_id = body.get("id")
        if not transcript_id:
            raise self._malformed_response("AssemblyAI submit returned no id")
        return transcript_id

    def _poll(self, transcript_id: str) -> Dict[str, Any]:
        sleep = self._sleep or time.sleep
        for attempt in range(self.poll_attempts):
            response = self.client.get(
                f"/transcript/{transcript_id}",
                headers=self._headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            transcript = self._json_body(response)
            status = transcript.get("status")

            if status == "completed":
                logger.info(
                    f"AssemblyAI transcript {transcript_id} completed after "
                    f"{attempt + 1} poll(s)"
                )
                return transcript
            if status == "failed":
                raise self._handle_api_error(
                    RuntimeError(
                        f"AssemblyAI transcription failed: {transcript.get('error')}"
                    )
                )

            if attempt + 1 < self.poll_attempts:
                sleep(self.poll_interval + attempt * self.poll_backoff)

        raise self._handle_api_error(
            TimeoutError(
                f"AssemblyAI polling timeout after {self.poll_attempts} attempts"
            )
        )
