"""
Configuration Loading and Management Functions.

Handles loading, saving, and applying environment overrides to the
StudyForge configuration.

Precedence: 1. Environment variables, 2. YAML file, 3. Defaults

Recognised environment variables:
    GEMINI_API_KEY / GOOGLE_API_KEY   API key for the Gemini provider
    STUDYFORGE_LLM_MODEL              Text model name
    STUDYFORGE_IMAGE_MODEL            Illustration model name
    STUDYFORGE_LOG_LEVEL              DEBUG, INFO, WARNING, ERROR
"""

import os
import re
from pathlib import Path
from typing import Any, Optional, TYPE_CHECKING

import yaml

from studyforge.core.logging import get_logger

if TYPE_CHECKING:
    from studyforge.core.config import Config

logger = get_logger(__name__)

CONFIG_FILENAMES = ("studyforge.yaml", "config.yaml")
LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_MODEL_NAME = re.compile(r"^[a-zA-Z0-9._:\-/]+$")


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Strings may use ${VAR_NAME} or ${VAR_NAME:default}. Dicts and lists
    are walked recursively; other values are returned unchanged.
    """
    if isinstance(value, str):
        pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

        def replace_env_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def _apply_env_overrides(config: "Config") -> "Config":
    """Apply environment variable overrides to configuration."""
    gemini_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    if gemini_key:
        config.llm.gemini.api_key = gemini_key

    model = os.environ.get("STUDYFORGE_LLM_MODEL")
    if model and _MODEL_NAME.match(model):
        config.llm.gemini.model = model

    image_model = os.environ.get("STUDYFORGE_IMAGE_MODEL")
    if image_model and _MODEL_NAME.match(image_model):
        config.llm.gemini.image_model = image_model

    log_level = os.environ.get("STUDYFORGE_LOG_LEVEL", "").upper()
    if log_level in LOG_LEVELS:
        config.logging.level = log_level
    elif log_level:
        logger.warning("Ignoring invalid STUDYFORGE_LOG_LEVEL", value=log_level)

    return config


def find_config_file(base_path: Path) -> Optional[Path]:
    """Return the first known config file in base_path, if any."""
    for filename in CONFIG_FILENAMES:
        candidate = base_path / filename
        if candidate.exists():
            return candidate
    return None


def load_config(
    config_path: Optional[Path] = None, base_path: Optional[Path] = None
) -> "Config":
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. Defaults to studyforge.yaml or
            config.yaml in base_path.
        base_path: Base path for relative paths. Defaults to current directory.

    Returns:
        Config object with all settings.

    Raises:
        ValueError: If an explicitly given config file is invalid.
    """
    from studyforge.core.config import Config

    base_path = base_path or Path.cwd()

    if config_path is None:
        config_path = find_config_file(base_path)
        if config_path is None:
            return _create_default_config(base_path)
    elif not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    config = Config.from_dict(data, base_path)
    logger.debug("Loaded configuration", path=str(config_path))
    return _apply_env_overrides(config)


def _create_default_config(base_path: Path) -> "Config":
    """Create default configuration with environment overrides."""
    from studyforge.core.config import Config

    config = Config()
    config._base_path = base_path
    return _apply_env_overrides(config)


def save_config(config: "Config", config_path: Path) -> None:
    """Write configuration to YAML, leaving the API key out of the file."""
    data = config.to_dict()
    data["llm"]["gemini"]["api_key"] = "${GEMINI_API_KEY}"

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
