"""
OpenTelemetry instrumentation for FastAPI and MongoDB.

Span export is configured through the standard OTEL_* environment variables.
"""

from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor

from natours.core.config import config
from natours.core.logger import logger


def instrument_app(app):
    """
    Instrument the FastAPI application and the PyMongo driver.

    No-op unless tracing is enabled in configuration.
    """
    if not config.tracing_enabled:
        logger.debug("Tracing disabled, skipping OpenTelemetry instrumentation")
        return

    try:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI instrumented with OpenTelemetry")

        # Motor runs on top of PyMongo, so this covers every database call
        PymongoInstrumentor().instrument()
        logger.info("PyMongo instrumented with OpenTelemetry")

    except Exception as e:
        logger.error("Failed to instrument application", error=e)
