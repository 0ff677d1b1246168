#!/usr/bin/env python3
"""
Error handlers for the web application.

Domain errors come from core.allocation.errors and carry their own status
code; this module only renders them in the API's error envelope.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.allocation.errors import AllocationError

logger = logging.getLogger(__name__)


async def allocation_exception_handler(
    request: Request,
    exc: AllocationError
) -> JSONResponse:
    """
    Handle allocation errors (400 / 404 / 409 / 500).

    Args:
        request: The FastAPI request.
        exc: The allocation error.

    Returns:
        JSONResponse with error details.
    """
    if exc.status_code >= 500:
        logger.error(f"Allocation error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"Allocation request rejected in {request.url.path}: {exc}")

    content = {
        "success": False,
        "error": exc.message,
        "type": exc.__class__.__name__
    }
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Render request validation failures as 400 instead of FastAPI's default 422.
    """
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Invalid request",
            "type": "ValidationError",
            "details": details
        }
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Internal error text is logged, never returned.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(AllocationError, allocation_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
