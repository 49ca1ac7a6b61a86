"""OpenAI chat completion provider integration."""

import logging
from typing import Optional

import httpx
import openai
from openai import OpenAI

from .base import DEFAULT_TIMEOUT_SECONDS, BaseTextProvider, InvokeParams

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert interview coach and career assistant. "
    "Follow the requested output format exactly."
)


class OpenAIProvider(BaseTextProvider):
    """OpenAI API integration for interview-prep content generation."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        organization: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize OpenAI provider.

        SDK-level retries are disabled; retrying is owned by the caller's
        RetryExecutor. Redirects are not followed.

        Args:
            api_key: OpenAI API key
            model: Model to use (default: gpt-4o-mini)
            organization: Optional organization ID
            timeout: Request timeout in seconds
        """
        super().__init__(model, timeout)
        self.client = OpenAI(
            api_key=api_key,
            organization=organization,
            timeout=timeout,
            max_retries=0,
            http_client=httpx.Client(timeout=timeout, follow_redirects=False),
        )

    def invoke(self, prompt: str, params: InvokeParams) -> str:
        """
        Generate a chat completion using the OpenAI API.

        Args:
            prompt: The user prompt
            params: Sampling settings

        Returns:
            The generated text

        Raises:
            ProviderCallFailure: If the API call fails or returns no content
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=params.temperature,
                max_tokens=params.max_tokens,
            )
        except openai.OpenAIError as e:
            raise self._handle_api_error(e)

        if not response.choices:
            raise self._malformed_response("OpenAI returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise self._malformed_response("OpenAI returned an empty message")
        return content
