"""
Tests for the retry module.

Tests the retry decorator, delay calculation, and which errors are
considered transient.
"""

from unittest.mock import Mock, patch

import pytest

from studyforge.core.retry import (
    RetryConfig,
    RetryError,
    TransientError,
    calculate_delay,
    llm_retry,
    retry,
)
from studyforge.llm.base import LLMError, LLMTimeoutError, RateLimitError


# ============================================================================
# calculate_delay() Tests
# ============================================================================


class TestCalculateDelay:
    """Tests for calculate_delay function."""

    def test_exponential_backoff(self):
        """Delay doubles per attempt."""
        assert calculate_delay(0, 1.0, 60.0, 2.0, jitter=False) == 1.0
        assert calculate_delay(1, 1.0, 60.0, 2.0, jitter=False) == 2.0
        assert calculate_delay(3, 1.0, 60.0, 2.0, jitter=False) == 8.0

    def test_max_delay_capping(self):
        """Delay never exceeds max_delay."""
        assert calculate_delay(10, 1.0, 30.0, 2.0, jitter=False) == 30.0

    def test_jitter(self):
        """Jitter adds up to 25% on top."""
        with patch("random.random", return_value=1.0):
            # 4.0 + 4.0 * 0.25
            assert calculate_delay(2, 1.0, 60.0, 2.0, jitter=True) == 5.0


# ============================================================================
# retry() Tests
# ============================================================================


class TestRetryDecorator:
    """Tests for the retry decorator."""

    @patch("time.sleep")
    def test_success_first_try(self, mock_sleep):
        func = Mock(return_value="ok", __name__="func")
        wrapped = retry(max_attempts=3)(func)

        assert wrapped() == "ok"
        assert func.call_count == 1
        mock_sleep.assert_not_called()

    @patch("time.sleep")
    def test_transient_error_retried(self, mock_sleep):
        func = Mock(side_effect=[TransientError("busy"), "ok"], __name__="func")
        wrapped = retry(max_attempts=3, jitter=False)(func)

        assert wrapped() == "ok"
        assert func.call_count == 2
        mock_sleep.assert_called_once_with(1.0)

    @patch("time.sleep")
    def test_exhausted_raises_retry_error(self, mock_sleep):
        error = ConnectionError("down")
        func = Mock(side_effect=error, __name__="func")
        wrapped = retry(max_attempts=3, jitter=False)(func)

        with pytest.raises(RetryError) as exc_info:
            wrapped()

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_exception is error
        assert func.call_count == 3
        assert mock_sleep.call_count == 2

    @patch("time.sleep")
    def test_non_retryable_propagates_immediately(self, mock_sleep):
        func = Mock(side_effect=ValueError("bad payload"), __name__="func")
        wrapped = retry(max_attempts=3)(func)

        with pytest.raises(ValueError):
            wrapped()
        assert func.call_count == 1
        mock_sleep.assert_not_called()

    @patch("time.sleep")
    def test_on_retry_callback(self, mock_sleep):
        callback = Mock()
        error = TimeoutError("slow")
        func = Mock(side_effect=[error, "ok"], __name__="func")

        retry(max_attempts=2, on_retry=callback)(func)()

        callback.assert_called_once_with(error, 1)

    def test_config_attached(self):
        @retry(max_attempts=0)
        def noop():
            return None

        assert isinstance(noop.retry_config, RetryConfig)
        assert noop.retry_config.max_attempts == 1


class TestLLMRetry:
    """Which LLM errors the llm_retry preset retries."""

    @patch("time.sleep")
    @pytest.mark.parametrize("error_cls", [RateLimitError, LLMTimeoutError])
    def test_transient_llm_errors_retried(self, mock_sleep, error_cls):
        calls = []

        @llm_retry
        def call_service():
            calls.append(1)
            if len(calls) < 3:
                raise error_cls("try later")
            return "done"

        assert call_service() == "done"
        assert len(calls) == 3

    @patch("time.sleep")
    def test_plain_llm_error_not_retried(self, mock_sleep):
        calls = []

        @llm_retry
        def call_service():
            calls.append(1)
            raise LLMError("invalid request")

        with pytest.raises(LLMError):
            call_service()
        assert len(calls) == 1
