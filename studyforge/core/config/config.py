"""
Main configuration class for StudyForge.

The Config dataclass aggregates the sub-configs and handles YAML parsing.

    studyforge.yaml
           ↓
    load_config() → Config object
           ↓
    Passed to: LLM client factory, content provider, orchestrator, CLI

Configuration Hierarchy
-----------------------
    Config
    ├── LLMConfig        # Provider, models, API key, timeouts, temperatures
    ├── StudyConfig      # Language, item counts, illustration concurrency
    └── LoggingConfig    # Level and optional log file

Environment Variables
---------------------
Secrets use ${VAR_NAME} syntax, optionally with a default:

    llm:
      gemini:
        api_key: ${GEMINI_API_KEY}
        model: ${STUDYFORGE_LLM_MODEL:gemini-2.5-flash}
"""

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional

from studyforge.core.config.llm import LLMConfig, LLMProviderConfig
from studyforge.core.config.study import StudyConfig


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    file: str = ""


@dataclass
class Config:
    """Main StudyForge configuration."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    study: StudyConfig = field(default_factory=StudyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    _base_path: Path = field(default_factory=Path.cwd, repr=False)

    def __post_init__(self) -> None:
        assert isinstance(self.llm, LLMConfig), "llm must be LLMConfig"
        assert isinstance(self.study, StudyConfig), "study must be StudyConfig"

        if self.llm.request_timeout <= 0:
            raise ValueError("llm.request_timeout must be positive")

    @property
    def log_path(self) -> Optional[Path]:
        """Absolute path of the log file, if file logging is enabled."""
        if not self.logging.file:
            return None
        path = Path(self.logging.file)
        if path.is_absolute():
            return path
        return self._base_path / path

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        result: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if key.startswith("_"):
                continue
            result[key] = value
        result["llm"].pop("_TEMPERATURE_PRESETS", None)
        return result

    @staticmethod
    def _filter_fields(cls_type: Any, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Filter dict to only keys that match dataclass fields, handling None."""
        if not data:
            return {}
        valid_keys = {f.name for f in fields(cls_type) if not f.name.startswith("_")}
        return {k: v for k, v in data.items() if k in valid_keys}

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], base_path: Optional[Path] = None
    ) -> "Config":
        """Create Config from dictionary."""
        from studyforge.core.config_loaders import expand_env_vars

        data = expand_env_vars(data or {})

        config = cls(
            llm=cls._parse_llm_config(data),
            study=StudyConfig(**cls._filter_fields(StudyConfig, data.get("study"))),
            logging=LoggingConfig(
                **cls._filter_fields(LoggingConfig, data.get("logging"))
            ),
        )

        if base_path:
            config._base_path = base_path

        return config

    @classmethod
    def _parse_llm_config(cls, data: Dict[str, Any]) -> LLMConfig:
        """Parse LLM config with its nested provider config."""
        llm_data = data.get("llm") or {}
        defaults = LLMConfig()

        gemini_data = {
            **cls._filter_fields(LLMProviderConfig, asdict(defaults.gemini)),
            **cls._filter_fields(LLMProviderConfig, llm_data.get("gemini")),
        }

        return LLMConfig(
            default_provider=llm_data.get("default_provider", "gemini"),
            gemini=LLMProviderConfig(**gemini_data),
            request_timeout=float(llm_data.get("request_timeout", 120.0)),
            max_output_tokens=int(llm_data.get("max_output_tokens", 8192)),
            command_temperatures=dict(llm_data.get("command_temperatures") or {}),
        )
