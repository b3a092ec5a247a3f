"""
Per-request context: correlation ID, W3C trace context and request time.

Values live in context variables so that the logger (and anything else
running inside the request task) can read them without a Request object.
"""

import re
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from natours.core.config import config

correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
trace_id_ctx: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)
span_id_ctx: ContextVar[Optional[str]] = ContextVar("span_id", default=None)

TRACEPARENT_PATTERN = re.compile(r'^00-([0-9a-f]{32})-([0-9a-f]{16})-[0-9a-f]{2}$')


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID from the current context"""
    return correlation_id_ctx.get()


def get_trace_id() -> Optional[str]:
    return trace_id_ctx.get()


def get_span_id() -> Optional[str]:
    return span_id_ctx.get()


def parse_traceparent(traceparent: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Extract (trace_id, span_id) from a W3C traceparent header.
    Format: 00-{32-hex-traceId}-{16-hex-spanId}-{2-hex-flags}

    Returns None for a missing, malformed or all-zero header.
    """
    if not traceparent:
        return None

    match = TRACEPARENT_PATTERN.match(traceparent)
    if not match:
        return None

    trace_id, span_id = match.groups()
    if trace_id == '0' * 32 or span_id == '0' * 16:
        return None
    return trace_id, span_id


def new_trace_context() -> Tuple[str, str]:
    """Generate a 32-hex trace ID and a 16-hex span ID"""
    return uuid.uuid4().hex, uuid.uuid4().hex[:16]


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    - Reuses the caller's correlation ID header or generates one
    - Continues the caller's traceparent or starts a new trace
    - Stamps the request with its arrival time (request.state.request_time)
    - Echoes correlation ID and traceparent on the response
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(config.correlation_id_header) or str(uuid.uuid4())
        trace_id, span_id = parse_traceparent(request.headers.get("traceparent")) or new_trace_context()

        correlation_id_ctx.set(correlation_id)
        trace_id_ctx.set(trace_id)
        span_id_ctx.set(span_id)

        request.state.correlation_id = correlation_id
        request.state.trace_id = trace_id
        request.state.request_time = datetime.now(timezone.utc).isoformat()

        response = await call_next(request)

        response.headers[config.correlation_id_header] = correlation_id
        response.headers["traceparent"] = f"00-{trace_id}-{span_id}-01"
        return response
