"""
Base LLM Provider Interface.

This module defines the LLMClient interface that generative providers
implement. The content provider only talks to this interface, so the
backing service can be swapped or mocked in tests.

Architecture Context
--------------------
    ┌──────────────────────┐
    │ LLMContentProvider   │  prompts, JSON parsing, validation
    └──────────┬───────────┘
               │
    ┌──────────┴───────────┐
    │      LLMClient       │  text + image generation, retries, timeouts
    └──────────┬───────────┘
               │
         ┌─────┴─────┐
         │  Gemini   │
         └───────────┘

Exception Hierarchy
-------------------
    LLMError (StudyForgeError)
    ├── RateLimitError      # transient, retried by @llm_retry
    ├── LLMTimeoutError     # transient, retried by @llm_retry
    └── ConfigurationError  # missing API key, unknown provider
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from studyforge.core.exceptions import StudyForgeError
from studyforge.core.retry import TransientError


class LLMError(StudyForgeError):
    """Base exception for LLM errors."""

    error_code = "SF-LLM-000"
    why_it_happened = "The generative service request failed"
    how_to_fix = ["Check your network connection", "Try again in a moment"]


class RateLimitError(LLMError, TransientError):
    """Raised when rate limit is exceeded."""

    error_code = "SF-LLM-001"
    why_it_happened = "The generative service rejected the request (rate limit or quota)"
    how_to_fix = ["Wait a minute and try again", "Check the quota of your API key"]


class LLMTimeoutError(LLMError, TransientError):
    """Raised when a request exceeds its timeout."""

    error_code = "SF-LLM-002"
    why_it_happened = "The generative service did not answer in time"
    how_to_fix = ["Try again", "Increase llm.request_timeout in the config"]


class ConfigurationError(LLMError):
    """Raised when there's a configuration issue."""

    error_code = "SF-LLM-003"
    why_it_happened = "The LLM provider is not configured"
    how_to_fix = [
        "Set GEMINI_API_KEY in your environment",
        "Or add llm.gemini.api_key to studyforge.yaml",
    ]


@dataclass
class GenerationConfig:
    """
    Configuration for text generation.

    Attributes:
        max_tokens: Maximum tokens to generate
        temperature: Creativity (0=deterministic, 1=creative)
        top_p: Nucleus sampling parameter
        stop_sequences: Strings that stop generation
        json_mode: Ask the provider for a JSON response body
        timeout: Seconds before the request is abandoned (None = SDK default)
    """

    max_tokens: int = 8192
    temperature: float = 0.3
    top_p: float = 1.0
    stop_sequences: Optional[List[str]] = None
    json_mode: bool = False
    timeout: Optional[float] = None


@dataclass(frozen=True)
class GeneratedImage:
    """Raw image bytes returned by an image-capable model."""

    mime_type: str
    data: bytes


class LLMClient(ABC):
    """
    Abstract base class for LLM providers.

    All LLM providers must implement this interface.
    """

    def _get_usage(self) -> Dict[str, int]:
        """Get or initialize the usage accumulator."""
        if not hasattr(self, "_usage"):
            self._usage = {
                "prompt_tokens": 0,
                "completion_tokens": 0,
                "total_tokens": 0,
            }
        return self._usage

    def _record_usage(
        self,
        prompt_tokens: int = 0,
        completion_tokens: int = 0,
    ) -> None:
        """Record token usage from a generation call."""
        usage = self._get_usage()
        usage["prompt_tokens"] += prompt_tokens
        usage["completion_tokens"] += completion_tokens
        usage["total_tokens"] += prompt_tokens + completion_tokens

    def get_usage(self) -> Dict[str, int]:
        """Get cumulative token usage."""
        return dict(self._get_usage())

    @abstractmethod
    def generate(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate text from prompt.

        Args:
            prompt: Input prompt
            config: Generation configuration

        Returns:
            Generated text
        """

    @abstractmethod
    def generate_with_context(
        self,
        system_prompt: str,
        user_prompt: str,
        context: Optional[str] = None,
        config: Optional[GenerationConfig] = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate text with system prompt and context.

        Args:
            system_prompt: System instructions
            user_prompt: User request
            context: Additional context (e.g., the source document)
            config: Generation configuration

        Returns:
            Generated text
        """

    def generate_image(
        self, prompt: str, config: Optional[GenerationConfig] = None
    ) -> Optional[GeneratedImage]:
        """
        Generate an illustration for a prompt.

        Returns:
            The first image in the response, or None if the model
            answered without an image.
        """
        raise LLMError(f"{type(self).__name__} does not support image generation")

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is available and configured."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name."""

    @property
    def supports_json_mode(self) -> bool:
        """Whether this provider supports JSON mode output."""
        return False

    @property
    def supports_images(self) -> bool:
        """Whether this provider can generate images."""
        return False
