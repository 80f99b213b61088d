"""Database functions for student profiles (``profiles`` table)."""

import asyncio
from typing import Any, Dict, Optional

from supabase import Client

from study_assistant.models.resources import ProfileUpdate, UserProfile

TABLE = "profiles"


async def get_profile(client: Client, user_id: str) -> Optional[UserProfile]:
    """Return the profile for ``user_id``, or None if the user has not set one up.

    Raises:
        RuntimeError: If the query fails
    """
    try:
        response = await asyncio.to_thread(
            lambda: client.table(TABLE).select('*').eq('user_id', user_id).limit(1).execute()
        )
    except Exception as e:
        raise RuntimeError(f"Failed to retrieve profile: {str(e)}") from e

    if not response.data:
        return None
    return UserProfile.model_validate(response.data[0])


async def upsert_profile(
    client: Client,
    user_id: str,
    update: ProfileUpdate,
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> UserProfile:
    """Create or replace the profile for ``user_id``.

    Raises:
        RuntimeError: If the write fails or returns no row
    """
    record: Dict[str, Any] = {
        'user_id': user_id,
        'name': name,
        'email': email,
        'university': update.university,
        'course': update.course,
        'semester': update.semester,
    }

    try:
        response = await asyncio.to_thread(
            lambda: client.table(TABLE).upsert(record, on_conflict='user_id').execute()
        )
    except Exception as e:
        raise RuntimeError(f"Failed to save profile: {str(e)}") from e

    if not response.data:
        raise RuntimeError("Failed to save profile: upsert returned no data")
    return UserProfile.model_validate(response.data[0])


async def update_profile(client: Client, user_id: str, update: ProfileUpdate) -> Optional[UserProfile]:
    """Update only the fields set on ``update``.

    Returns:
        The updated profile, or None if the user has no profile yet

    Raises:
        RuntimeError: If the update fails
    """
    changes = update.model_dump(exclude_unset=True)
    if not changes:
        return await get_profile(client, user_id)

    try:
        response = await asyncio.to_thread(
            lambda: client.table(TABLE).update(changes).eq('user_id', user_id).execute()
        )
    except Exception as e:
        raise RuntimeError(f"Failed to update profile: {str(e)}") from e

    if not response.data:
        return None
    return UserProfile.model_validate(response.data[0])
