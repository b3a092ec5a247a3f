"""
Health and operational API endpoints
"""

import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from natours.core.config import config
from natours.core.logger import logger
from natours.db.mongodb import db

router = APIRouter()

# Track service start time
start_time = time.time()


@router.get("/")
async def root():
    """Service information"""
    return {
        "service": config.service_name,
        "version": config.service_version,
        "environment": config.environment,
        "message": "Natours Service is running",
        "status": "operational",
    }


@router.get("/api/health")
def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": config.service_name,
        "timestamp": datetime.now().isoformat(),
        "version": config.api_version,
    }


@router.get("/api/health/ready")
async def readiness_check():
    """Readiness probe - ready only while MongoDB answers a ping"""
    check = await check_database_health()

    if check["status"] == "healthy":
        return {
            "status": "ready",
            "service": config.service_name,
            "timestamp": datetime.now().isoformat(),
            "checks": [check],
        }

    logger.warning(
        "Readiness check failed",
        metadata={"event": "readiness_check_failed", "error": check.get("error")}
    )
    return JSONResponse(
        status_code=503,
        content={
            "status": "not ready",
            "service": config.service_name,
            "timestamp": datetime.now().isoformat(),
            "checks": [check],
        },
    )


@router.get("/api/health/live")
def liveness_check():
    """Liveness probe - check if the app is running"""
    return {
        "status": "alive",
        "service": config.service_name,
        "timestamp": datetime.now().isoformat(),
        "uptime": time.time() - start_time,
    }


async def check_database_health() -> Dict[str, Any]:
    """Check MongoDB database connectivity"""
    check_start = time.time()

    try:
        if db.client is None:
            raise RuntimeError("MongoDB client is not connected")

        await db.client.admin.command('ping')
        response_time_ms = (time.time() - check_start) * 1000

        logger.debug(
            "Database health check passed",
            metadata={"event": "health_check_database_success", "response_time_ms": response_time_ms}
        )
        return {
            "name": "database",
            "status": "healthy",
            "response_time_ms": round(response_time_ms, 2),
            "database": config.mongodb_database,
        }

    except Exception as e:
        response_time_ms = (time.time() - check_start) * 1000
        logger.error(
            f"Database health check failed: {e}",
            error=e,
            metadata={"event": "health_check_database_failed", "database_url": config.mongodb_host}
        )
        return {
            "name": "database",
            "status": "unhealthy",
            "error": str(e),
            "response_time_ms": round(response_time_ms, 2),
        }
