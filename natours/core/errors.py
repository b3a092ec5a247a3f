"""
Application exception and the FastAPI handlers that render errors as JSON
"""

import traceback
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from natours.core.config import config
from natours.core.logger import logger


def _status_label(status_code: int) -> str:
    return "fail" if 400 <= status_code < 500 else "error"


class ErrorResponse(Exception):
    """Custom exception for application errors"""

    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    @property
    def status(self) -> str:
        """'fail' for client errors, 'error' for server errors"""
        return _status_label(self.status_code)


class ErrorResponseModel(BaseModel):
    """Pydantic model for error responses"""
    status: str
    error: str
    details: dict = None


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for custom ErrorResponse exceptions"""
    metadata = {
        "event": "error_response",
        "status_code": exc.status_code,
        "url": str(request.url),
        "method": request.method,
        **exc.details,
    }

    if config.environment == "development":
        # Include more detailed error info in development
        metadata["traceback"] = traceback.format_exc()

    if exc.status_code >= 500:
        logger.error(f"Error: {exc.message}", metadata=metadata)
    else:
        logger.warning(f"Error: {exc.message}", metadata=metadata)

    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status, "error": exc.message, "details": exc.details}
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler for FastAPI/Starlette HTTPException"""
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Can't find {request.url.path} on this server!"
    else:
        message = exc.detail

    logger.warning(
        f"HTTPException: {message}",
        metadata={
            "event": "http_exception",
            "status_code": exc.status_code,
            "url": str(request.url),
            "method": request.method,
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"status": _status_label(exc.status_code), "error": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request body/query validation errors"""
    logger.warning(
        "Validation error",
        metadata={"event": "validation_error", "errors": exc.errors(), "url": str(request.url)}
    )
    return JSONResponse(
        status_code=422,
        content={
            "status": "fail",
            "error": "Validation error",
            "details": jsonable_errors(exc),
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serializable context (e.g. raised ValueErrors) from validation errors"""
    errors = []
    for err in exc.errors():
        err = dict(err)
        ctx = err.get("ctx")
        if ctx:
            err["ctx"] = {k: str(v) for k, v in ctx.items()}
        errors.append(err)
    return errors
