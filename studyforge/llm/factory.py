"""
LLM provider factory.

Create and configure LLM clients based on configuration.
"""

from typing import Callable, Dict, Optional

from studyforge.core.config import Config
from studyforge.core.logging import get_logger
from studyforge.llm.base import ConfigurationError, GenerationConfig, LLMClient

logger = get_logger(__name__)


def get_generation_config(
    config: Config,
    command: Optional[str] = None,
    **overrides,
) -> GenerationConfig:
    """
    Get a GenerationConfig with temperature tuned for the command.

    Args:
        config: StudyForge configuration
        command: Artifact kind value ("summary", "test", ...) or "grading"
        **overrides: Additional overrides for GenerationConfig fields

    Returns:
        GenerationConfig with the configured timeout and temperature
    """
    settings = {
        "temperature": config.llm.get_temperature(command) if command else 0.3,
        "max_tokens": config.llm.max_output_tokens,
        "timeout": config.llm.request_timeout,
    }
    settings.update(overrides)
    return GenerationConfig(**settings)


def _create_gemini_client(config: Config) -> LLMClient:
    """Create Gemini client."""
    from studyforge.llm.gemini import GeminiClient

    return GeminiClient(
        api_key=config.llm.gemini.api_key or None,
        model=config.llm.gemini.model,
        image_model=config.llm.gemini.image_model,
        timeout=config.llm.request_timeout,
    )


_PROVIDER_FACTORIES: Dict[str, Callable[[Config], LLMClient]] = {
    "gemini": _create_gemini_client,
    "google": _create_gemini_client,
}


def get_llm_client(config: Config, provider: Optional[str] = None) -> LLMClient:
    """
    Get an LLM client for the configured provider.

    Args:
        config: StudyForge configuration
        provider: Provider name; defaults to config.llm.default_provider

    Returns:
        Configured LLMClient

    Raises:
        ConfigurationError: If the provider is unknown or not configured
    """
    name = (provider or config.llm.default_provider).lower()
    factory = _PROVIDER_FACTORIES.get(name)
    if factory is None:
        raise ConfigurationError(
            f"Unknown LLM provider: {name}",
            how_to_fix=[f"Use one of: {', '.join(sorted(_PROVIDER_FACTORIES))}"],
        )

    client = factory(config)
    if not client.is_available():
        raise ConfigurationError(f"LLM provider '{name}' is not configured")

    logger.debug("Created LLM client", provider=name, model=client.model_name)
    return client
