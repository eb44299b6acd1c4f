"""
Tests for the Gemini client.

The google-generativeai module is replaced by a Mock assigned to the
client's lazily loaded module slot, so no network or SDK is involved.

Organization
------------
- TestConfiguration: availability and missing key
- TestGenerate: request shape, JSON mode, timeouts, usage
- TestErrors: error classification and retry exhaustion
- TestGenerateImage: inline image extraction
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from studyforge.llm.base import (
    ConfigurationError,
    GeneratedImage,
    GenerationConfig,
    LLMError,
    LLMTimeoutError,
    RateLimitError,
)
from studyforge.llm.gemini import GeminiClient, _classify_error


def make_client(**kwargs):
    client = GeminiClient(api_key="test-key", **kwargs)
    genai = MagicMock()
    client._genai = genai
    model = genai.GenerativeModel.return_value
    return client, genai, model


def text_response(text, prompt_tokens=0, completion_tokens=0):
    return SimpleNamespace(
        text=text,
        usage_metadata=SimpleNamespace(
            prompt_token_count=prompt_tokens,
            candidates_token_count=completion_tokens,
        ),
    )


class TestConfiguration:
    def test_available_with_key(self):
        assert GeminiClient(api_key="k").is_available()

    def test_unavailable_without_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        client = GeminiClient()
        assert client.is_available() is False
        with pytest.raises(ConfigurationError):
            client.genai

    def test_capabilities(self):
        client = GeminiClient(api_key="k")
        assert client.supports_json_mode
        assert client.supports_images
        assert client.model_name == "gemini-2.5-flash"


class TestGenerate:
    def test_prompt_combines_system_context_and_request(self):
        client, _, model = make_client()
        model.generate_content.return_value = text_response(" [1] ")

        result = client.generate_with_context("SYSTEM", "REQUEST", context="DOC")

        assert result == "[1]"
        prompt = model.generate_content.call_args.args[0]
        assert prompt.index("SYSTEM") < prompt.index("SOURCE TEXT:\nDOC") < prompt.index("REQUEST")

    def test_json_mode_and_timeout(self):
        client, _, model = make_client(timeout=60)
        model.generate_content.return_value = text_response("{}")

        client.generate("p", GenerationConfig(json_mode=True, temperature=0.1, timeout=15))

        kwargs = model.generate_content.call_args.kwargs
        assert kwargs["generation_config"]["response_mime_type"] == "application/json"
        assert kwargs["generation_config"]["temperature"] == 0.1
        assert kwargs["request_options"] == {"timeout": 15}

    def test_client_timeout_used_as_default(self):
        client, _, model = make_client(timeout=42)
        model.generate_content.return_value = text_response("ok")

        client.generate("p")

        assert model.generate_content.call_args.kwargs["request_options"] == {"timeout": 42}

    def test_usage_recorded(self):
        client, _, model = make_client()
        model.generate_content.return_value = text_response("ok", 10, 5)

        client.generate("p")

        assert client.get_usage() == {
            "prompt_tokens": 10,
            "completion_tokens": 5,
            "total_tokens": 15,
        }

    def test_model_cached(self):
        client, genai, model = make_client()
        model.generate_content.return_value = text_response("ok")

        client.generate("a")
        client.generate("b")

        genai.GenerativeModel.assert_called_once_with("gemini-2.5-flash")


class TestErrors:
    @pytest.mark.parametrize(
        "message,expected",
        [
            ("429 Resource exhausted", RateLimitError),
            ("Quota exceeded for project", RateLimitError),
            ("Deadline exceeded", LLMTimeoutError),
            ("invalid argument", LLMError),
        ],
    )
    def test_classification(self, message, expected):
        assert type(_classify_error(RuntimeError(message), "generation")) is expected

    def test_builtin_timeout(self):
        assert isinstance(_classify_error(TimeoutError(), "x"), LLMTimeoutError)

    @patch("time.sleep")
    def test_retry_exhaustion_becomes_llm_error(self, mock_sleep):
        client, _, model = make_client()
        model.generate_content.side_effect = RuntimeError("429 rate limit")

        with pytest.raises(LLMError) as exc_info:
            client.generate("p")

        assert "gave up after 3 attempts" in str(exc_info.value)
        assert model.generate_content.call_count == 3

    @patch("time.sleep")
    def test_empty_response_not_retried(self, mock_sleep):
        client, _, model = make_client()
        model.generate_content.return_value = text_response("")

        with pytest.raises(LLMError):
            client.generate("p")
        assert model.generate_content.call_count == 1

    @patch("time.sleep")
    def test_blocked_response_is_empty(self, mock_sleep):
        client, _, model = make_client()

        class Blocked:
            usage_metadata = None

            @property
            def text(self):
                raise ValueError("no text part")

        model.generate_content.return_value = Blocked()

        with pytest.raises(LLMError) as exc_info:
            client.generate("p")
        assert "Empty response" in str(exc_info.value)


class TestGenerateImage:
    def _response(self, *parts):
        return SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))]
        )

    def test_first_inline_image(self):
        client, genai, model = make_client(image_model="img-model")
        model.generate_content.return_value = self._response(
            SimpleNamespace(inline_data=None, text="caption"),
            SimpleNamespace(inline_data=SimpleNamespace(mime_type="image/png", data=b"abc")),
        )

        image = client.generate_image("a leaf")

        assert image == GeneratedImage(mime_type="image/png", data=b"abc")
        genai.GenerativeModel.assert_called_with("img-model")

    def test_no_image_part(self):
        client, _, model = make_client()
        model.generate_content.return_value = self._response(
            SimpleNamespace(inline_data=None, text="only text")
        )
        assert client.generate_image("x") is None

    def test_no_candidates(self):
        client, _, model = make_client()
        model.generate_content.return_value = SimpleNamespace(candidates=[])
        assert client.generate_image("x") is None

    @patch("time.sleep")
    def test_image_failure(self, mock_sleep):
        client, _, model = make_client()
        model.generate_content.side_effect = RuntimeError("invalid argument")

        with pytest.raises(LLMError):
            client.generate_image("x")
