"""
Rate limiting for write endpoints open to ordinary users.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from contenthub.exceptions import ErrorCode

logger = logging.getLogger(__name__)

COMMENT_CREATE_LIMIT = "10/minute"
ENGAGEMENT_LIMIT = "60/minute"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["300/hour"],
    storage_uri="memory://",
    headers_enabled=True,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
    response = JSONResponse(
        status_code=429,
        content={
            "error": {
                "status_code": 429,
                "message": f"Rate limit exceeded: {exc.detail}",
                "type": "rate_limit_error",
                "error_code": ErrorCode.RATE_LIMIT_EXCEEDED.value,
                "details": {},
                "path": request.url.path,
            }
        },
    )
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


def configure_rate_limiting(app) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
