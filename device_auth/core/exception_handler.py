import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import DeviceAuthorizationError, ErrorCode, create_error_detail

logger = logging.getLogger(__name__)


def format_validation_error(exc: Any) -> str:
    """
    Format validation error for fastapi
    """
    errors = exc.errors() if hasattr(exc, "errors") else []
    messages: list[str] = []
    for err in errors:
        msg = err.get("msg", "")
        loc = err.get("loc", [])
        field = loc[-1] if isinstance(loc, (list, tuple)) and loc else ""
        field_str = str(field) if field is not None else ""
        if msg:
            if field_str:
                messages.append(f"{field_str}: {msg}")
            else:
                messages.append(msg)

    return " | ".join(messages) if messages else "Invalid request"


def oauth_error_response(error: str, error_description: str | None = None, status_code: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=create_error_detail(error, error_description))


def register_exception_handlers(app: FastAPI) -> None:
    """Translate device authorization failures into OAuth error bodies."""

    @app.exception_handler(DeviceAuthorizationError)
    async def device_authorization_exception_handler(request: Request, exc: DeviceAuthorizationError):
        if exc.status_code >= 500:
            # Server-side fault, not a bad request; operators need to see this
            logger.error(f"Handling error: {exc.__class__.__name__}, {exc.message}")
        else:
            logger.info(f"Handling error: {exc.__class__.__name__}, {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.info(f"Handling error: {exc.__class__.__name__}, {exc.detail}")
        if exc.status_code == 405:
            return JSONResponse(
                status_code=405,
                content=create_error_detail(
                    ErrorCode.METHOD_NOT_ALLOWED, f"Request method '{request.method}' not supported"
                ),
                headers=exc.headers,
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return oauth_error_response("invalid_request", format_validation_error(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Handling error: {exc.__class__.__name__}, {exc}", exc_info=True)
        return oauth_error_response(ErrorCode.SERVER_ERROR, "Internal server error", status_code=500)
