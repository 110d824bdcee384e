# complyark/exceptions/handlers.py
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.util import get_remote_address
from complyark.core import tracing
from complyark.exceptions.cases import CaseWorkflowError
import time


def get_safe_headers(request: Request) -> dict:
    """Extract request headers worth logging"""
    headers = request.headers
    return {
        "user_agent": headers.get("user-agent", "unknown"),
        "user_id": headers.get("x-user-id", "none"),
        "referer": headers.get("referer", "none")
    }


def _error_body(request: Request, status_code: int, detail, **extra) -> dict:
    """Common JSON shape of every error response"""
    body = {
        "detail": detail,
        "status_code": status_code,
        "trace_id": tracing.get_current_trace_id(),
        "timestamp": time.time(),
        "path": request.url.path
    }
    body.update(extra)
    return body


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    client_ip = get_remote_address(request)
    headers = get_safe_headers(request)

    content = _error_body(request, exc.status_code, exc.detail)

    if isinstance(exc, CaseWorkflowError):
        content["error_type"] = exc.error_type
        fields = getattr(exc, "fields", None)
        if fields:
            content["fields"] = fields

    log = tracing.error if exc.status_code >= 500 else tracing.warning
    log(
        f"🚨 HTTP {exc.status_code}: {exc.detail}",
        url=str(request.url),
        ip=client_ip,
        **headers
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, 'headers', None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    client_ip = get_remote_address(request)
    headers = get_safe_headers(request)

    errors = [
        {
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]

    tracing.warning(
        f"⚠️ Validation error: {len(errors)} errors",
        url=str(request.url),
        ip=client_ip,
        **headers
    )

    return JSONResponse(
        status_code=422,
        content=_error_body(request, 422, "Validation error", errors=errors)
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    client_ip = get_remote_address(request)
    headers = get_safe_headers(request)

    tracing.error(
        f"🔥 UNHANDLED EXCEPTION: {str(exc)}",
        url=str(request.url),
        ip=client_ip,
        error_type=type(exc).__name__,
        **headers
    )

    # Sent from outside the middleware stack, so the trace header is set here
    content = _error_body(request, 500, "Internal server error")
    return JSONResponse(
        status_code=500,
        content=content,
        headers={"X-Trace-ID": content["trace_id"]} if content["trace_id"] else None
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    client_ip = get_remote_address(request)
    headers = get_safe_headers(request)

    tracing.warning(
        f"🔍 HTTP {exc.status_code}: {exc.detail}",
        url=str(request.url),
        ip=client_ip,
        **headers
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.status_code, exc.detail)
    )
