# complyark/middleware/rate_limiting.py - Rate limiting
import time

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from loguru import logger

from complyark.core.config import settings
from complyark.core.tracing import get_current_trace_id

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.DEFAULT_RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 with trace context, in the same body shape as other errors"""
    client_ip = get_remote_address(request)
    trace_id = get_current_trace_id()

    logger.warning(f"🚫 Rate limit exceeded | ip={client_ip} | path={request.url.path}")

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "detail": f"Rate limit exceeded: {exc.detail}",
            "status_code": status.HTTP_429_TOO_MANY_REQUESTS,
            "trace_id": trace_id,
            "timestamp": time.time()
        },
        headers={"Retry-After": "60"}
    )
