"""Google Generative AI provider integration."""

import google.generativeai as genai
from google.generativeai.types import GenerationConfig

from .base import DEFAULT_TIMEOUT_SECONDS, BaseTextProvider, InvokeParams


class GoogleProvider(BaseTextProvider):
    """Google Gemini integration for interview-prep content generation."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize Google provider.

        Args:
            api_key: Google API key
            model: Model to use (default: gemini-1.5-flash)
            timeout: Request timeout in seconds
        """
        super().__init__(model, timeout)
        genai.configure(api_key=api_key)
        self.client = genai.GenerativeModel(model)

    def invoke(self, prompt: str, params: InvokeParams) -> str:
        """
        Generate a completion using the Gemini API.

        Args:
            prompt: The prompt to send to the model
            params: Sampling settings

        Returns:
            The generated text

        Raises:
            ProviderCallFailure: If the API call fails or yields no text
        """
        try:
            generation_config = GenerationConfig(
                temperature=params.temperature,
                max_output_tokens=params.max_tokens,
            )

            response = self.client.generate_content(
                prompt,
                generation_config=generation_config,
                request_options={"timeout": self.timeout},
            )
        except Exception as e:
            raise self._handle_api_error(e)

        # response.text raises ValueError when the candidate was blocked
        # or carries no parts
        try:
            text = response.text
        except ValueError as e:
            raise self._malformed_response(f"Gemini returned no usable text: {e}")
        if not text:
            raise self._malformed_response("Gemini returned an empty response")
        return text
