"""Text analysis endpoint.

Accepts an already extracted excerpt (e.g. sampled client-side) and
returns the parsed analysis without storing anything.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from study_assistant.auth import CurrentUser, get_current_user
from study_assistant.config import get_settings
from study_assistant.middleware.rate_limit import RATE_LIMITS, get_limiter
from study_assistant.models.resources import AnalyzeTextRequest
from study_assistant.services.analyzer import analyze_excerpt
from study_assistant.services.gemini_client import get_gemini_client
from study_assistant.services.sampler import MAX_EXCERPT_CHARS

router = APIRouter(prefix="/api", tags=["analysis"])
limiter = get_limiter()


@router.post("/analyze")
@limiter.limit(RATE_LIMITS["analyze"])
async def analyze_text(
    request: Request,
    response: Response,
    body: AnalyzeTextRequest,
    user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Analyze study material text with Gemini.

    On AI failure the default analysis (Other, no topics) is returned with an
    ``error`` message instead of an error status.
    """
    if not body.text or not body.text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='The request must include a non-empty "text" field',
        )

    settings = get_settings()
    outcome = await analyze_excerpt(
        get_gemini_client(),
        body.text[:MAX_EXCERPT_CHARS],
        model=settings.model_name,
        max_retries=settings.ai_max_retries,
    )

    response.headers["X-Analysis-Status"] = outcome.status
    result: Dict[str, Any] = outcome.result.model_dump(mode="json")
    if outcome.error is not None:
        result["error"] = outcome.error
    return result
