"""Exception handlers producing the ``{success: false, ...}`` envelope."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from alert_service.exceptions import CaseServiceError, ValidationError
from alert_service.models.case import utcnow

logger = logging.getLogger(__name__)


def error_response(
    status_code: int, message: str, errors: Optional[List[Any]] = None
) -> JSONResponse:
    content: Dict[str, Any] = {
        "success": False,
        "message": message,
        "timestamp": utcnow(),
    }
    if errors:
        content["errors"] = errors

    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def _field_name(location: tuple) -> str:
    # Drop the leading "body" / "query" / "path" segment
    parts = [str(part) for part in location[1:]] or [str(part) for part in location]
    return ".".join(parts)


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers."""

    @app.exception_handler(CaseServiceError)
    async def case_service_exception_handler(request: Request, exc: CaseServiceError):
        """Handle case service exceptions."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(
                f"{request.method} {request.url.path} rejected "
                f"({exc.status_code}): {exc.message}"
            )

        errors = exc.fields if isinstance(exc, ValidationError) else None
        return error_response(exc.status_code, exc.message, errors)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Request validation failed for {request.method} {request.url.path}: {exc.errors()}"
        )

        errors = [
            {"field": _field_name(tuple(error.get("loc", ()))), "message": error.get("msg")}
            for error in exc.errors()
        ]
        return error_response(400, "Validation failed", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle FastAPI HTTP exceptions."""
        logger.warning(f"HTTP exception {exc.status_code} on {request.url.path}: {exc.detail}")

        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )

        return error_response(500, "Internal server error")
