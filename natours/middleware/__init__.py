"""
Middleware modules for the Natours Service
"""

from .request_context import (
    RequestContextMiddleware,
    get_correlation_id,
    get_span_id,
    get_trace_id,
)

__all__ = [
    "RequestContextMiddleware",
    "get_correlation_id",
    "get_span_id",
    "get_trace_id",
]
