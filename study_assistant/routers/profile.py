"""Student profile endpoints (university, course, semester)."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from study_assistant.auth import CurrentUser, get_current_user
from study_assistant.db.profiles import get_profile, update_profile, upsert_profile
from study_assistant.db.supabase_client import get_supabase_client
from study_assistant.middleware.rate_limit import RATE_LIMITS, get_limiter
from study_assistant.models.resources import ProfileUpdate, UserProfile

router = APIRouter(prefix="/api", tags=["profile"])
limiter = get_limiter()


@router.get("/profile", response_model=UserProfile)
@limiter.limit(RATE_LIMITS["read"])
async def read_profile(request: Request, user: CurrentUser = Depends(get_current_user)) -> UserProfile:
    """Return the caller's profile; 404 means profile setup is still needed."""
    try:
        profile = await get_profile(get_supabase_client(), user.id)
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.put("/profile", response_model=UserProfile)
@limiter.limit(RATE_LIMITS["write"])
async def save_profile(
    request: Request,
    update: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
) -> UserProfile:
    """Create or replace the caller's profile."""
    try:
        return await upsert_profile(
            get_supabase_client(), user.id, update, name=user.name, email=user.email
        )
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.patch("/profile", response_model=UserProfile)
@limiter.limit(RATE_LIMITS["write"])
async def edit_profile(
    request: Request,
    update: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
) -> UserProfile:
    """Change only the supplied fields of an existing profile."""
    try:
        profile = await update_profile(get_supabase_client(), user.id, update)
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile
