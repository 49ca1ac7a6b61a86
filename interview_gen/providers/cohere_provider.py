"""Cohere chat provider integration over the REST API."""

from typing import Optional

import httpx

from .base import DEFAULT_TIMEOUT_SECONDS, BaseTextProvider, InvokeParams

COHERE_API_BASE = "https://api.cohere.ai"
CHAT_PATH = "/v1/chat"


class CohereProvider(BaseTextProvider):
    """Cohere API integration for interview-prep content generation."""

    def __init__(
        self,
        api_key: str,
        model: str = "command-r-plus",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize Cohere provider.

        Args:
            api_key: Cohere API key
            model: Model to use (default: command-r-plus)
            timeout: Request timeout in seconds
            http_client: Preconfigured client, mainly for tests
        """
        super().__init__(model, timeout)
        self.client = http_client or httpx.Client(
            base_url=COHERE_API_BASE,
            timeout=timeout,
            follow_redirects=False,
        )
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def invoke(self, prompt: str, params: InvokeParams) -> str:
        """
        Generate a chat response using the Cohere API.

        Args:
            prompt: The message to send
            params: Sampling settings

        Returns:
            The generated text

        Raises:
            ProviderCallFailure: If the request fails or the body has no text
        """
        payload = {
            "model": self.model,
            "message": prompt,
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
        }
        try:
            response = self.client.post(
                CHAT_PATH,
                json=payload,
                headers=self._headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self._handle_api_error(e)

        try:
            body = response.json()
        except ValueError:
            raise self._malformed_response("Cohere returned a non-JSON body")

        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise self._malformed_response("Cohere response has no text")
        return text
