# app/core/middleware.py
"""Request correlation and access logging"""
import logging
import time
import uuid
from contextvars import ContextVar

from starlette.requests import Request

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


async def correlation_id_middleware(request: Request, call_next):
    """Tag the request, and every log line it produces, with a correlation id"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    request.state.correlation_id = correlation_id
    token = correlation_id_var.set(correlation_id)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token)

    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """Access log for API calls; health probes are not logged"""
    if request.url.path.startswith("/health"):
        return await call_next(request)

    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    logger.log(level, f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response
