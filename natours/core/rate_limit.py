"""
Request rate limiting with slowapi, keyed by client address
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from natours.core.config import config
from natours.core.logger import logger

limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit_enabled,
    default_limits=[config.rate_limit],
)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(
        "Rate limit exceeded",
        metadata={
            "event": "rate_limit_exceeded",
            "ip_address": request.client.host if request.client else None,
            "url": str(request.url),
            "limit": str(exc.detail),
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "status": "fail",
            "error": "Too many requests from this IP, please try again later!",
        },
    )
