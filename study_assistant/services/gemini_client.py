"""Gemini API client initialization.

Provides a process-wide Gemini client built from the application settings.
Uses the google-genai SDK (not google.generativeai).
"""

import threading

from google import genai

from study_assistant.config import get_settings

_client: genai.Client | None = None
_lock = threading.Lock()


def get_gemini_client() -> genai.Client:
    """Return the shared Gemini client, creating it on first use.

    Raises:
        ValueError: If GEMINI_API_KEY is not set in environment.

    Example:
        >>> client = get_gemini_client()
        >>> response = client.models.generate_content(
        ...     model="gemini-2.0-flash",
        ...     contents=["Hello world"]
        ... )
    """
    global _client
    if _client is not None:
        return _client
    with _lock:
        if _client is not None:
            return _client
        settings = get_settings()
        if not settings.gemini_api_key:
            raise ValueError(
                "GEMINI_API_KEY not set in environment. "
                "Please set this variable in your .env file or environment."
            )
        _client = genai.Client(api_key=settings.gemini_api_key)
        return _client


def reset_gemini_client() -> None:
    """Drop the cached client (used when settings change, e.g. in tests)."""
    global _client
    with _lock:
        _client = None
