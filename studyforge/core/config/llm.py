"""
LLM configuration.

Provider settings for the generative service, the image model used for
section illustrations, request timeouts, and temperature presets per
artifact kind.
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class LLMProviderConfig:
    """Individual LLM provider configuration."""

    model: str = ""
    image_model: str = ""
    api_key: str = ""
    temperature: float = 0.3  # low for factual accuracy


@dataclass
class LLMConfig:
    """LLM providers configuration."""

    default_provider: str = "gemini"
    gemini: LLMProviderConfig = field(
        default_factory=lambda: LLMProviderConfig(
            model="gemini-2.5-flash", image_model="gemini-2.5-flash-image"
        )
    )

    # Seconds before a single request to the service is abandoned
    request_timeout: float = 120.0
    max_output_tokens: int = 8192

    # Per-kind overrides, e.g. {"test": 0.4}
    command_temperatures: Dict[str, float] = field(default_factory=lambda: {})

    _TEMPERATURE_PRESETS: Dict[str, float] = field(
        default_factory=lambda: {
            "summary": 0.2,
            "glossary": 0.2,
            "flashcards": 0.2,
            "mindmap": 0.3,
            "test": 0.3,
            "grading": 0.1,
        },
        repr=False,
    )

    def get_temperature(self, command: str) -> float:
        """Get temperature for an artifact kind or grading.

        Priority:
        1. User override in command_temperatures
        2. Built-in preset
        3. Default provider temperature
        """
        if command in self.command_temperatures:
            return self.command_temperatures[command]
        if command in self._TEMPERATURE_PRESETS:
            return self._TEMPERATURE_PRESETS[command]
        return self.gemini.temperature
