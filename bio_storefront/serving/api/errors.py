"""
Exception Handlers

Domain errors render as ``{"error": message}`` with their own status code.
Malformed request bodies are validation errors (400), anything else is 500.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bio_storefront.errors import StorefrontError

logger = structlog.get_logger(__name__)


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err["loc"] if p != "body") for err in exc.errors()]
    logger.debug("Request validation failed", path=request.url.path, fields=fields)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "fields": fields},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
