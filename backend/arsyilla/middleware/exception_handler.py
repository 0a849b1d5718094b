"""Render errors as ``{"error": CODE, "message": ..., "details": {...}}``."""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import ArsyillaException, ErrorCode

logger = logging.getLogger(__name__)


async def arsyilla_exception_handler(request: Request, exc: ArsyillaException) -> JSONResponse:
    """Client errors log at WARNING, upstream failures at ERROR."""
    logger.log(
        logging.ERROR if exc.status_code >= 500 else logging.WARNING,
        "%s %s failed: %s",
        request.method, request.url.path, exc.error_code.value,
        extra={"status_code": exc.status_code, "details": exc.details},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies become 400 VALIDATION_ERROR with one entry per field."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    logger.warning(
        "%s %s rejected: invalid request body",
        request.method, request.url.path,
        extra={"errors": errors},
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": ErrorCode.VALIDATION_ERROR.value,
            "message": "Request validation failed",
            "details": {"errors": errors},
        },
    )
