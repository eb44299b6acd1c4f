"""
Configuration Management for StudyForge.

Dataclass hierarchy mapped onto a YAML file, with environment variable
expansion for secrets.

    from studyforge.core.config import Config, load_config

    config = load_config()
    workers = config.study.max_illustration_workers
"""

from studyforge.core.config.config import Config, LoggingConfig
from studyforge.core.config.llm import LLMConfig, LLMProviderConfig
from studyforge.core.config.study import StudyConfig
from studyforge.core.config_loaders import (
    expand_env_vars,
    load_config,
    save_config,
)

__all__ = [
    "Config",
    "LoggingConfig",
    "LLMConfig",
    "LLMProviderConfig",
    "StudyConfig",
    "expand_env_vars",
    "load_config",
    "save_config",
]
