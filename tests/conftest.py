"""Shared fixtures: a valid environment and fresh singletons for every test."""

import pytest

from study_assistant.config import get_settings
from study_assistant.db.supabase_client import reset_supabase_client
from study_assistant.middleware.rate_limit import get_limiter
from study_assistant.services.gemini_client import reset_gemini_client


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-api-key")
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "test-supabase-key")
    monkeypatch.setenv("FIREBASE_STORAGE_BUCKET", "test-bucket.firebasestorage.app")
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    get_settings.cache_clear()
    reset_gemini_client()
    reset_supabase_client()
    yield
    get_settings.cache_clear()
    reset_gemini_client()
    reset_supabase_client()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Reset the rate limiter before each test to avoid rate limit interference."""
    get_limiter().reset()
