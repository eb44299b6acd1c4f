"""
Tests for configuration loading.

Organization
------------
- TestDefaults: dataclass defaults and validation
- TestLoadConfig: YAML loading, env expansion, env overrides
- TestTemperatures: per-kind temperature presets
"""

import pytest
import yaml

from studyforge.core.config import (
    Config,
    StudyConfig,
    expand_env_vars,
    load_config,
    save_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "STUDYFORGE_LLM_MODEL",
        "STUDYFORGE_IMAGE_MODEL",
        "STUDYFORGE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    """Tests for the default configuration."""

    def test_defaults(self):
        config = Config()
        assert config.llm.default_provider == "gemini"
        assert config.llm.gemini.model == "gemini-2.5-flash"
        assert config.llm.gemini.image_model == "gemini-2.5-flash-image"
        assert config.study.max_illustration_workers == 4
        assert config.study.question_count == 5
        assert config.log_path is None

    @pytest.mark.parametrize(
        "field,value",
        [
            ("flashcard_count", 0),
            ("question_count", 0),
            ("option_count", 1),
            ("max_illustration_workers", 0),
        ],
    )
    def test_invalid_study_values(self, field, value):
        with pytest.raises(ValueError):
            StudyConfig(**{field: value})

    def test_to_dict_hides_internal_fields(self):
        data = Config().to_dict()
        assert "_base_path" not in data
        assert "_TEMPERATURE_PRESETS" not in data["llm"]
        assert data["study"]["language"] == "English"


class TestLoadConfig:
    """Tests for load_config()."""

    def test_no_file_gives_defaults(self, temp_dir):
        config = load_config(base_path=temp_dir)
        assert config.study.flashcard_count == 10

    def test_yaml_values(self, temp_dir):
        (temp_dir / "studyforge.yaml").write_text(
            yaml.safe_dump(
                {
                    "llm": {"request_timeout": 30, "gemini": {"model": "gemini-pro"}},
                    "study": {"language": "Dutch", "flashcard_count": 15, "bogus": 1},
                    "logging": {"level": "DEBUG", "file": "logs/sf.log"},
                }
            )
        )

        config = load_config(base_path=temp_dir)

        assert config.llm.request_timeout == 30.0
        assert config.llm.gemini.model == "gemini-pro"
        # Unset keys keep their defaults
        assert config.llm.gemini.image_model == "gemini-2.5-flash-image"
        assert config.study.language == "Dutch"
        assert config.study.flashcard_count == 15
        assert config.log_path == temp_dir / "logs" / "sf.log"

    def test_env_var_expansion(self, temp_dir, monkeypatch):
        monkeypatch.setenv("MY_KEY", "secret-value")
        path = temp_dir / "custom.yaml"
        path.write_text("llm:\n  gemini:\n    api_key: ${MY_KEY}\n    model: ${UNSET_MODEL:gemini-x}\n")

        config = load_config(path, base_path=temp_dir)

        assert config.llm.gemini.api_key == "secret-value"
        assert config.llm.gemini.model == "gemini-x"

    def test_env_overrides(self, temp_dir, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "from-env")
        monkeypatch.setenv("STUDYFORGE_LLM_MODEL", "gemini-2.0-pro")
        monkeypatch.setenv("STUDYFORGE_LOG_LEVEL", "warning")

        config = load_config(base_path=temp_dir)

        assert config.llm.gemini.api_key == "from-env"
        assert config.llm.gemini.model == "gemini-2.0-pro"
        assert config.logging.level == "WARNING"

    def test_invalid_model_name_ignored(self, temp_dir, monkeypatch):
        monkeypatch.setenv("STUDYFORGE_LLM_MODEL", "bad model; rm -rf")
        config = load_config(base_path=temp_dir)
        assert config.llm.gemini.model == "gemini-2.5-flash"

    def test_missing_explicit_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "nope.yaml")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "broken.yaml"
        path.write_text("llm: [unclosed")
        with pytest.raises(ValueError):
            load_config(path)

    def test_non_mapping_yaml(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_non_positive_timeout(self, temp_dir):
        path = temp_dir / "timeout.yaml"
        path.write_text("llm:\n  request_timeout: 0\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_save_does_not_write_key(self, temp_dir):
        config = Config()
        config.llm.gemini.api_key = "AIzaSecretSecretSecret"
        path = temp_dir / "out" / "studyforge.yaml"

        save_config(config, path)

        text = path.read_text()
        assert "AIzaSecret" not in text
        assert "${GEMINI_API_KEY}" in text


class TestTemperatures:
    """Tests for LLMConfig.get_temperature()."""

    def test_presets(self):
        llm = Config().llm
        assert llm.get_temperature("grading") == 0.1
        assert llm.get_temperature("summary") == 0.2

    def test_override_wins(self):
        llm = Config().llm
        llm.command_temperatures["test"] = 0.7
        assert llm.get_temperature("test") == 0.7

    def test_unknown_command_uses_provider_default(self):
        assert Config().llm.get_temperature("other") == 0.3


def test_expand_env_vars_nested(monkeypatch):
    monkeypatch.setenv("SF_LANG", "French")
    data = {"study": {"language": "${SF_LANG}"}, "list": ["${SF_MISSING:x}", 3]}
    assert expand_env_vars(data) == {"study": {"language": "French"}, "list": ["x", 3]}
