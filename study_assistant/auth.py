"""Bearer-token authentication backed by Supabase Auth.

Routes depend on ``get_current_user``; the token is the access token the
frontend receives from Supabase sign-in (e.g. Google OAuth).
"""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from study_assistant.db.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """The authenticated caller."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> CurrentUser:
    """Resolve the bearer token to a user or reject the request with 401."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("User must be authenticated")

    client = get_supabase_client()
    try:
        response = await asyncio.to_thread(client.auth.get_user, credentials.credentials)
    except Exception as e:
        logger.info(f"Token verification failed: {type(e).__name__}")
        raise _unauthorized("Invalid or expired token")

    user = getattr(response, "user", None)
    if user is None:
        raise _unauthorized("Invalid or expired token")

    metadata = user.user_metadata or {}
    return CurrentUser(
        id=str(user.id),
        email=user.email,
        name=metadata.get("full_name") or metadata.get("name"),
    )
