"""
Supabase client initialization module.

Provides a thread-safe singleton Supabase client. When
SUPABASE_SERVICE_ROLE_KEY is set the client uses it (bypassing RLS);
ownership is then enforced by filtering on ``user_id`` in every query.
Falls back to the anon key.
"""

import threading
from supabase import create_client, Client
from study_assistant.config import get_settings

_client: Client | None = None
_lock = threading.Lock()


def get_supabase_client() -> Client:
    """
    Return the shared Supabase client, initializing once in a thread-safe way.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_KEY are missing or invalid
    """
    global _client
    if _client is not None:
        return _client
    with _lock:
        if _client is not None:
            return _client
        settings = get_settings()
        key = settings.supabase_service_role_key or settings.supabase_key
        try:
            _client = create_client(settings.supabase_url, key)
            return _client
        except Exception as e:
            raise ValueError(f"Failed to create Supabase client: {str(e)}") from e


def reset_supabase_client() -> None:
    """Drop the cached client so the next call rebuilds it from settings."""
    global _client
    with _lock:
        _client = None
