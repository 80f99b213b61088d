"""Rate limiting using slowapi.

Uploads are the expensive path (PDF parsing plus a Gemini call) and get the
tightest limit.
"""

import json

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address


def get_client_ip(request: Request) -> str:
    """
    Get the client IP address from the request.

    Only trusts X-Forwarded-For from configured trusted proxies to prevent
    IP spoofing.
    """
    from study_assistant.config import get_settings

    direct_ip: str = get_remote_address(request)

    settings = get_settings()
    if not settings.trusted_proxies:
        return direct_ip

    trusted_proxy_list = [
        ip.strip() for ip in settings.trusted_proxies.split(",")
        if ip.strip()
    ]

    if direct_ip in trusted_proxy_list:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

    return direct_ip


# In-memory storage, keyed by client IP
limiter = Limiter(key_func=get_client_ip, default_limits=["200/minute"])


RATE_LIMITS = {
    "upload": "10/minute",    # POST /api/resources - PDF parsing + Gemini
    "analyze": "30/minute",   # POST /api/analyze - Gemini only
    "read": "100/minute",     # GET /api/resources, /api/profile
    "write": "30/minute",     # DELETE /api/resources/{id}, PUT/PATCH /api/profile
}


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Return 429 Too Many Requests with Retry-After and X-RateLimit-* headers.
    """
    retry_after = getattr(exc, "retry_after", 60)

    error_body = {
        "detail": "Rate limit exceeded",
        "message": f"Too many requests. Please retry after {retry_after} seconds.",
        "retry_after": retry_after,
    }

    response = Response(
        content=json.dumps(error_body),
        status_code=429,
        media_type="application/json",
    )
    response.headers["Retry-After"] = str(retry_after)
    response.headers["X-RateLimit-Remaining"] = "0"
    if getattr(exc, "detail", None):
        response.headers["X-RateLimit-Limit"] = exc.detail

    return response


def get_limiter() -> Limiter:
    """Return the module-level limiter used by route decorators."""
    return limiter
