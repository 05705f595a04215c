"""Rate limiting configuration and dependencies."""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from eventdesk.api.auth import ADMIN_HEADER
from eventdesk.config import settings


def get_rate_limit_key(request: Request) -> str:
    """Get a unique key for rate limiting.

    Prefers the admin resolved by authentication. Before that has run, a
    numeric X-Admin-User-Id header is used; anything else falls back to the
    remote IP address.
    """
    admin = getattr(request.state, "admin", None)
    if admin is not None and admin.user_id is not None:
        return f"admin:{admin.user_id}"
    admin_user_id = request.headers.get(ADMIN_HEADER, "").strip()
    if admin_user_id.isdecimal():
        return f"admin:{int(admin_user_id)}"
    return get_remote_address(request)


# Rate limiting can be disabled via settings.rate_limit_enabled
limiter = Limiter(
    key_func=get_rate_limit_key,
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Return the standard error envelope with a Retry-After header."""
    response = JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too Many Requests",
                "detail": str(exc.detail),
            }
        },
    )
    # slowapi does not always expose the window; default to one minute
    response.headers["Retry-After"] = "60"
    return response


limit_admin = limiter.limit(lambda: settings.rate_limit_admin)
