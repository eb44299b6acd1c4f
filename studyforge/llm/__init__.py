"""
LLM Provider Integrations.

A thin, swappable interface to the generative service that produces the
study material and the section illustrations.

Provider Selection
------------------
    llm:
      default_provider: gemini
      gemini:
        model: gemini-2.5-flash
        image_model: gemini-2.5-flash-image
        api_key: ${GEMINI_API_KEY}

Or programmatically:

    from studyforge.llm import get_llm_client
    client = get_llm_client(config)
    text = client.generate("Explain photosynthesis in two sentences")

Retries and Timeouts
--------------------
Clients retry rate limits and timeouts with @llm_retry and pass the
configured request timeout to every call.
"""

from studyforge.llm.base import (
    ConfigurationError,
    GeneratedImage,
    GenerationConfig,
    LLMClient,
    LLMError,
    LLMTimeoutError,
    RateLimitError,
)
from studyforge.llm.factory import get_generation_config, get_llm_client

__all__ = [
    "ConfigurationError",
    "GeneratedImage",
    "GenerationConfig",
    "LLMClient",
    "LLMError",
    "LLMTimeoutError",
    "RateLimitError",
    "get_generation_config",
    "get_llm_client",
]
