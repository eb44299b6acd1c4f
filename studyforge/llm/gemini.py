"""
Google Gemini LLM provider.

Supports the Gemini API via the google-generativeai package: text
generation (optionally in JSON mode) and image generation for section
illustrations.
"""

import os
from typing import Any, Dict, Optional

from studyforge.core.logging import get_logger
from studyforge.core.retry import RetryError, llm_retry
from studyforge.llm.base import (
    ConfigurationError,
    GeneratedImage,
    GenerationConfig,
    LLMClient,
    LLMError,
    LLMTimeoutError,
    RateLimitError,
)

logger = get_logger(__name__)

_RATE_LIMIT_TERMS = ("rate limit", "quota", "429", "resource exhausted")
_TIMEOUT_TERMS = ("deadline", "timed out", "timeout", "504")


def _classify_error(error: Exception, what: str) -> LLMError:
    """Map an SDK exception onto the LLM error hierarchy."""
    if isinstance(error, LLMError):
        return error

    message = str(error).lower()
    if any(term in message for term in _RATE_LIMIT_TERMS):
        return RateLimitError(f"Gemini {what} rate limited: {error}")
    if isinstance(error, TimeoutError) or any(
        term in message for term in _TIMEOUT_TERMS
    ):
        return LLMTimeoutError(f"Gemini {what} timed out: {error}")
    return LLMError(f"Gemini {what} failed: {error}")


class GeminiClient(LLMClient):
    """
    Google Gemini API client.

    Requires GEMINI_API_KEY environment variable (or an explicit api_key).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.5-flash",
        image_model: str = "gemini-2.5-flash-image",
        timeout: Optional[float] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: API key (defaults to GEMINI_API_KEY env var)
            model: Text model name
            image_model: Image model name used by generate_image()
            timeout: Default per-request timeout in seconds
        """
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY", "")
        self._model_name = model
        self.image_model_name = image_model
        self.timeout = timeout
        self._genai: Any = None
        self._models: Dict[str, Any] = {}

    @property
    def genai(self) -> Any:
        """Lazy-load and configure the google-generativeai module."""
        if self._genai is None:
            if not self.api_key:
                raise ConfigurationError(
                    "GEMINI_API_KEY not set. Set it in environment or pass to constructor."
                )
            try:
                import google.generativeai as genai
            except ImportError:
                raise ImportError(
                    "google-generativeai is required for Gemini. "
                    "Install with: pip install google-generativeai"
                )

            genai.configure(api_key=self.api_key)
            self._genai = genai
        return self._genai

    def _get_model(self, name: str) -> Any:
        """Return a cached GenerativeModel for a model name."""
        if name not in self._models:
            self._models[name] = self.genai.GenerativeModel(name)
        return self._models[name]

    @property
    def client(self) -> Any:
        """The text GenerativeModel."""
        return self._get_model(self._model_name)

    @property
    def model_name(self) -> str:
        return self._model_name

    def is_available(self) -> bool:
        """Check if Gemini is configured."""
        return bool(self.api_key)

    def _request_options(self, config: GenerationConfig) -> Dict[str, Any]:
        timeout = config.timeout if config.timeout is not None else self.timeout
        if timeout is None:
            return {}
        return {"timeout": timeout}

    @staticmethod
    def _build_generation_config(config: GenerationConfig) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {
            "max_output_tokens": config.max_tokens,
            "temperature": config.temperature,
            "top_p": config.top_p,
        }
        if config.stop_sequences:
            generation_config["stop_sequences"] = config.stop_sequences
        if config.json_mode:
            generation_config["response_mime_type"] = "application/json"
        return generation_config

    def generate(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        **kwargs,
    ) -> str:
        """Generate text from prompt."""
        config = config or GenerationConfig()
        try:
            return self._generate_with_retry(
                prompt,
                self._build_generation_config(config),
                self._request_options(config),
            )
        except RetryError as e:
            raise LLMError(
                f"Gemini generation gave up after {e.attempts} attempts: "
                f"{e.last_exception}"
            ) from e

    @llm_retry
    def _generate_with_retry(
        self,
        prompt: str,
        generation_config: Dict[str, Any],
        request_options: Dict[str, Any],
    ) -> str:
        """Internal generation with retry logic."""
        try:
            response = self.client.generate_content(
                prompt,
                generation_config=generation_config,
                request_options=request_options or None,
            )
            text = self._response_text(response)
        except Exception as e:
            raise _classify_error(e, "generation") from e

        self._record_response_usage(response)
        if not text:
            raise LLMError("Empty response from Gemini")
        return text.strip()

    @staticmethod
    def _response_text(response: Any) -> str:
        """Return response.text, or "" when the response has no text part."""
        try:
            return response.text or ""
        except ValueError:
            # Raised by the SDK for blocked or text-less candidates
            return ""

    def _record_response_usage(self, response: Any) -> None:
        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return
        self._record_usage(
            prompt_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            completion_tokens=getattr(usage, "candidates_token_count", 0) or 0,
        )

    def generate_with_context(
        self,
        system_prompt: str,
        user_prompt: str,
        context: Optional[str] = None,
        config: Optional[GenerationConfig] = None,
        **kwargs,
    ) -> str:
        """Generate with system prompt and context."""
        parts = [system_prompt]

        if context:
            parts.append(f"\n\nSOURCE TEXT:\n{context}")

        parts.append(f"\n\n{user_prompt}")

        return self.generate("\n".join(parts), config, **kwargs)

    def generate_image(
        self, prompt: str, config: Optional[GenerationConfig] = None
    ) -> Optional[GeneratedImage]:
        """Generate an image; None when the model returns no inline image."""
        config = config or GenerationConfig()
        try:
            return self._generate_image_with_retry(
                prompt, self._request_options(config)
            )
        except RetryError as e:
            raise LLMError(
                f"Gemini image generation gave up after {e.attempts} attempts: "
                f"{e.last_exception}"
            ) from e

    @llm_retry
    def _generate_image_with_retry(
        self, prompt: str, request_options: Dict[str, Any]
    ) -> Optional[GeneratedImage]:
        try:
            response = self._get_model(self.image_model_name).generate_content(
                prompt,
                request_options=request_options or None,
            )
        except Exception as e:
            raise _classify_error(e, "image generation") from e

        return self._extract_image(response)

    @staticmethod
    def _extract_image(response: Any) -> Optional[GeneratedImage]:
        """Return the first inline image part of the first candidate."""
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return None

        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                return GeneratedImage(mime_type=inline.mime_type, data=inline.data)
        return None

    @property
    def supports_json_mode(self) -> bool:
        """Gemini supports JSON mode via response_mime_type."""
        return True

    @property
    def supports_images(self) -> bool:
        return bool(self.image_model_name)
