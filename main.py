"""
FastAPI Application - Natours Service
Tours and reviews over MongoDB, with tour ratings kept in step with reviews
"""

# Load environment variables from .env file FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from natours.api import health, reviews, tours, users
from natours.core.config import config
from natours.core.errors import (
    ErrorResponse,
    error_response_handler,
    http_exception_handler,
    validation_exception_handler,
)
from natours.core.logger import logger
from natours.core.rate_limit import limiter, rate_limit_handler
from natours.core.telemetry import instrument_app
from natours.db import close_mongo_connection, connect_to_mongo, create_indexes, db
from natours.middleware import RequestContextMiddleware
from natours.services.review_trigger import wait_idle

API_PREFIX = f"/api/{config.api_version}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting Natours Service...")
    await connect_to_mongo()
    await create_indexes(db.database)

    logger.info(
        "Natours Service started successfully",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    yield

    # Shutdown: let in-flight rating recomputations finish before closing the client
    logger.info("Shutting down Natours Service...")
    await wait_idle(timeout=10)
    await close_mongo_connection()


app = FastAPI(
    title="Natours Service",
    description="Tours and reviews with review-consistent tour ratings",
    version=config.service_version,
    lifespan=lifespan
)

instrument_app(app)

# Configure error handlers
app.add_exception_handler(ErrorResponse, error_response_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Rate limiting
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Correlation ID and W3C trace context, outermost
app.add_middleware(RequestContextMiddleware)

# Include API routers
app.include_router(health.router, tags=["health"])
app.include_router(tours.router, prefix=f"{API_PREFIX}/tours", tags=["tours"])
app.include_router(reviews.tour_reviews_router, prefix=f"{API_PREFIX}/tours", tags=["reviews"])
app.include_router(reviews.router, prefix=f"{API_PREFIX}/reviews", tags=["reviews"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["users"])


if __name__ == "__main__":
    import uvicorn

    logger.info(
        f"Starting {config.service_name} on port {config.port}",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "development"
    )
