"""Tests for retry logic with exponential backoff."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from study_assistant.exceptions import AIServiceError, RateLimitedError
from study_assistant.utils.retry import (
    NON_RETRYABLE_STATUS_CODES,
    RETRYABLE_STATUS_CODES,
    extract_status_code,
    retry_with_backoff,
    should_retry_exception,
)


class MockHTTPException(Exception):
    """Mock HTTP exception with status code."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class MockNetworkException(Exception):
    """Mock network exception."""

    pass


@pytest.fixture
def mock_sleep():
    with patch("study_assistant.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


# Tests for extract_status_code


def test_extract_status_code_from_attribute():
    """Test extracting status code from status_code attribute."""
    exception = MockHTTPException("Server error", 500)
    assert extract_status_code(exception) == 500


def test_extract_status_code_from_code_attribute():
    """Test extracting status code from code attribute (google-genai APIError)."""
    exception = Exception("Error")
    exception.code = 429  # type: ignore
    assert extract_status_code(exception) == 429


def test_extract_status_code_from_response():
    """Test extracting status code from response.status_code."""
    exception = Exception("Error")
    exception.response = MagicMock()  # type: ignore
    exception.response.status_code = 503  # type: ignore
    assert extract_status_code(exception) == 503


def test_extract_status_code_none():
    """Test returning None when no status code found."""
    assert extract_status_code(Exception("Generic error")) is None


def test_extract_status_code_from_ai_service_error():
    assert extract_status_code(RateLimitedError()) == 429
    assert extract_status_code(AIServiceError("failed")) is None


# Tests for should_retry_exception


def test_should_retry_non_retryable_status():
    """Test that non-retryable status codes return False."""
    for status_code in NON_RETRYABLE_STATUS_CODES:
        exception = MockHTTPException(f"Error {status_code}", status_code)
        assert should_retry_exception(exception) is False


def test_should_retry_retryable_status():
    """Test that retryable status codes return True."""
    for status_code in RETRYABLE_STATUS_CODES:
        exception = MockHTTPException(f"Error {status_code}", status_code)
        assert should_retry_exception(exception) is True


def test_should_retry_network_timeout():
    """Test that timeout errors are retryable."""
    assert should_retry_exception(MockNetworkException("Connection timeout")) is True


def test_should_retry_connection_reset():
    """Test that connection reset errors are retryable."""
    assert should_retry_exception(MockNetworkException("Connection reset by peer")) is True


def test_should_not_retry_unknown_exception():
    """Test that exceptions without a status or network marker are not retried."""
    assert should_retry_exception(ValueError("Some error")) is False
    assert should_retry_exception(AIServiceError("Gemini API returned empty response")) is False


# Tests for retry_with_backoff decorator


@pytest.mark.asyncio
async def test_retry_successful_on_first_attempt(mock_sleep):
    """Test that successful function call doesn't retry."""
    call_count = 0

    @retry_with_backoff(max_retries=3)
    async def succeeds():
        nonlocal call_count
        call_count += 1
        return "success"

    assert await succeeds() == "success"
    assert call_count == 1
    mock_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_retry_eventually_succeeds(mock_sleep):
    """Test that function succeeds after retries."""
    call_count = 0

    @retry_with_backoff(max_retries=3)
    async def succeeds_on_third_attempt():
        nonlocal call_count
        call_count += 1
        if call_count < 3:
            raise MockHTTPException("Server error", 500)
        return "success"

    assert await succeeds_on_third_attempt() == "success"
    assert call_count == 3


@pytest.mark.asyncio
async def test_retry_max_retries_exceeded(mock_sleep):
    """Test that exception is raised after max retries."""
    call_count = 0

    @retry_with_backoff(max_retries=2)
    async def always_fails():
        nonlocal call_count
        call_count += 1
        raise MockHTTPException("Server error", 500)

    with pytest.raises(MockHTTPException):
        await always_fails()

    assert call_count == 3  # Initial attempt + 2 retries


@pytest.mark.asyncio
async def test_retry_zero_retries_single_attempt(mock_sleep):
    call_count = 0

    @retry_with_backoff(max_retries=0)
    async def always_fails():
        nonlocal call_count
        call_count += 1
        raise MockHTTPException("Server error", 503)

    with pytest.raises(MockHTTPException):
        await always_fails()

    assert call_count == 1
    mock_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_retry_non_retryable_error(mock_sleep):
    """Test that non-retryable errors don't trigger retry."""
    call_count = 0

    @retry_with_backoff(max_retries=3)
    async def bad_request():
        nonlocal call_count
        call_count += 1
        raise MockHTTPException("Bad request", 400)

    with pytest.raises(MockHTTPException):
        await bad_request()

    assert call_count == 1  # No retries for 400 error


@pytest.mark.asyncio
async def test_retry_exponential_backoff(mock_sleep):
    """Test that retry delays increase exponentially."""

    @retry_with_backoff(max_retries=3, base_delay=1.0, max_jitter=0.0)
    async def always_fails():
        raise MockHTTPException("Server error", 500)

    with pytest.raises(MockHTTPException):
        await always_fails()

    delays = [call.args[0] for call in mock_sleep.await_args_list]

    # 1s, 2s, 4s
    assert delays == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_retry_jitter_added(mock_sleep):
    """Test that random jitter is added to delays."""

    @retry_with_backoff(max_retries=2, base_delay=1.0, max_jitter=1.0)
    async def always_fails():
        raise MockHTTPException("Server error", 500)

    with pytest.raises(MockHTTPException):
        await always_fails()

    delays = [call.args[0] for call in mock_sleep.await_args_list]

    assert len(delays) == 2
    assert 1.0 <= delays[0] < 2.0  # 1.0 base + [0, 1.0) jitter
    assert 2.0 <= delays[1] < 3.0  # 2.0 base + [0, 1.0) jitter


@pytest.mark.asyncio
async def test_retry_logs_attempts(mock_sleep, caplog):
    """Test that retry attempts are logged."""
    caplog.set_level(logging.WARNING)

    @retry_with_backoff(max_retries=2)
    async def always_fails():
        raise MockHTTPException("Server error", 500)

    with pytest.raises(MockHTTPException):
        await always_fails()

    assert "attempt 1/2" in caplog.text
    assert "attempt 2/2" in caplog.text
    assert "Retrying in" in caplog.text
    assert "failed after 2 retries" in caplog.text


@pytest.mark.asyncio
async def test_retry_preserves_function_metadata():
    """Test that the decorator keeps the wrapped function's name and docstring."""

    @retry_with_backoff()
    async def documented():
        """Original docstring."""
        return 1

    assert documented.__name__ == "documented"
    assert documented.__doc__ == "Original docstring."
