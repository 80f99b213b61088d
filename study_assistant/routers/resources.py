"""
Study resource API endpoints.

Upload flow:
1. Validate the PDF (size, MIME type, filename)
2. Load the student's profile for prompt context
3. Sample the leading pages and analyze them with Gemini
4. Store the PDF in Firebase Storage under the owner's prefix
5. Insert the resource record with the analysis

An AI failure does not fail the upload; the default analysis is stored and
the X-Analysis-Status header says why.
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, Response, UploadFile, status

from study_assistant.auth import CurrentUser, get_current_user
from study_assistant.config import get_settings
from study_assistant.db.profiles import get_profile
from study_assistant.db.resources import create_resource, delete_resource, get_resource, list_resources
from study_assistant.db.supabase_client import get_supabase_client
from study_assistant.exceptions import DocumentUnreadableError
from study_assistant.middleware.logging import get_request_id
from study_assistant.middleware.rate_limit import RATE_LIMITS, get_limiter
from study_assistant.models.resources import Resource
from study_assistant.services.analyzer import analyze_pdf
from study_assistant.services.file_validator import validate_pdf
from study_assistant.services.gemini_client import get_gemini_client
from study_assistant.services.resource_search import filter_resources
from study_assistant.services.storage import build_storage_path, delete_blob, upload_bytes

router = APIRouter(prefix="/api", tags=["resources"])
limiter = get_limiter()
logger = logging.getLogger(__name__)


@router.post("/resources", status_code=status.HTTP_201_CREATED, response_model=Resource)
@limiter.limit(RATE_LIMITS["upload"])
async def upload_resource(
    request: Request,
    response: Response,
    file: UploadFile = File(..., description="PDF study material"),
    title: Optional[str] = Form(None, description="Display title (defaults to the file name)"),
    user: CurrentUser = Depends(get_current_user),
) -> Resource:
    """
    Upload a PDF, analyze it and store it as a resource owned by the caller.

    Returns:
        201: Resource stored (check X-Analysis-Status for ok/fallback/rate_limited)
        400: Empty or non-PDF file
        413: File too large
        422: PDF could not be read
        500: Storage or database failure
    """
    settings = get_settings()
    content, file_hash, sanitized_filename = await validate_pdf(file, settings.max_upload_bytes)
    original_name = file.filename or sanitized_filename

    supabase_client = get_supabase_client()
    try:
        profile = await get_profile(supabase_client, user.id)
    except RuntimeError as e:
        logger.warning(f"[{get_request_id(request)}] Profile lookup failed, analyzing without context: {e}")
        profile = None

    try:
        outcome = await analyze_pdf(
            get_gemini_client(),
            content,
            profile,
            model=settings.model_name,
            max_pages=settings.max_pages_to_analyze,
            max_retries=settings.ai_max_retries,
        )
    except DocumentUnreadableError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    storage_path = build_storage_path(user.id, sanitized_filename)
    try:
        file_url = await asyncio.to_thread(upload_bytes, storage_path, content)
    except Exception as e:
        logger.error(f"[{get_request_id(request)}] Storage upload failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Upload failed: {e}")

    file_info = {
        'title': (title or "").strip() or original_name,
        'file_name': original_name,
        'file_url': file_url,
        'storage_path': storage_path,
        'file_hash': file_hash,
        'user_id': user.id,
        'user_name': user.name,
        'analysis_error': outcome.error,
    }

    try:
        resource = await create_resource(supabase_client, outcome.result, file_info)
    except (RuntimeError, ValueError) as e:
        logger.error(f"[{get_request_id(request)}] Saving resource failed, removing uploaded file: {e}")
        try:
            await asyncio.to_thread(delete_blob, file_url)
        except Exception as cleanup_error:
            logger.error(f"[{get_request_id(request)}] Removing uploaded file failed: {cleanup_error}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Upload failed: {e}")

    response.headers["X-Analysis-Status"] = outcome.status
    return resource


@router.get("/resources", response_model=List[Resource])
@limiter.limit(RATE_LIMITS["read"])
async def list_my_resources(
    request: Request,
    q: Optional[str] = Query(None, description="Search title, subject and topics"),
    user: CurrentUser = Depends(get_current_user),
) -> List[Resource]:
    """List the caller's resources, newest first, optionally filtered by ``q``."""
    try:
        resources = await list_resources(get_supabase_client(), user.id)
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return filter_resources(resources, q)


@router.get("/resources/{resource_id}", response_model=Resource)
@limiter.limit(RATE_LIMITS["read"])
async def get_my_resource(
    request: Request,
    resource_id: str,
    user: CurrentUser = Depends(get_current_user),
) -> Resource:
    """Return one of the caller's resources (404 if missing or not owned)."""
    try:
        resource = await get_resource(get_supabase_client(), resource_id, user.id)
    except ValueError:
        resource = None
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    if resource is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return resource


@router.delete("/resources/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["write"])
async def delete_my_resource(
    request: Request,
    resource_id: str,
    user: CurrentUser = Depends(get_current_user),
) -> Response:
    """Delete the record, then the stored PDF."""
    supabase_client = get_supabase_client()
    try:
        resource = await get_resource(supabase_client, resource_id, user.id)
    except ValueError:
        resource = None
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    if resource is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")

    try:
        await delete_resource(supabase_client, resource_id, user.id)
        await asyncio.to_thread(delete_blob, resource.file_url)
    except Exception as e:
        logger.error(f"[{get_request_id(request)}] Error removing resource {resource_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error removing file: {e}",
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
