"""
Global error handlers
Render every failure as {"error": <message>} and keep internal details in the logs
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_service.core.exceptions import (
    AppException,
    ErrorCode,
    MalformedRequestError,
    http_exception_to_app_exception,
)


def _logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def _context(request: Request) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "request_id": getattr(request.state, "request_id", None),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle AppException - our custom exceptions

    Returns the user-facing message to the client, logs the internal message
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    _logger(request).log(
        level,
        f"AppException: {exc.error_code.value} - {exc.internal_message}",
        extra={
            **_context(request),
            "error_code": exc.error_code.value,
            "status_code": exc.status_code,
        },
    )

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle FastAPI/Starlette HTTPException (404, 405 from routing)
    """
    app_exc = http_exception_to_app_exception(exc)

    _logger(request).warning(
        f"HTTPException: {exc.status_code} - {exc.detail}",
        extra={**_context(request), "status_code": exc.status_code},
    )

    return JSONResponse(
        status_code=app_exc.status_code,
        content=app_exc.to_dict(),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request body decoding errors

    Field-level detail goes to the log only
    """
    app_exc = MalformedRequestError()
    field_errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]

    _logger(request).warning(
        f"Malformed request on {request.url.path}",
        extra={
            **_context(request),
            "error_code": app_exc.error_code.value,
            "errors": field_errors,
        },
    )

    return JSONResponse(status_code=app_exc.status_code, content=app_exc.to_dict())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions

    Logs full stack trace but returns generic message to user
    """
    _logger(request).error(
        f"Unhandled exception: {type(exc).__name__}: {exc}",
        exc_info=exc,
        extra={
            **_context(request),
            "error_code": ErrorCode.INTERNAL_SERVER_ERROR.value,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal server error"},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app
    """
    app.add_exception_handler(AppException, app_exception_handler)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_exception_handler(Exception, generic_exception_handler)
