"""
Request tagging and access logging middleware
"""
import logging
import time
import uuid
from http import HTTPStatus

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"

_STATUS_PHRASES = {s.value: s.phrase for s in HTTPStatus}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a fresh request id to request state and echo it in the response"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    Log each request on entry and on completion

    Completion records carry the final status and the elapsed time in ms.
    """

    def __init__(self, app: ASGIApp, logger: logging.Logger):
        """
        Initialize middleware

        Args:
            app: ASGI application
            logger: Application logger
        """
        super().__init__(app)
        self.logger = logger

    async def dispatch(self, request: Request, call_next):
        context = {
            "remote_addr": request.client.host if request.client else None,
            "request_id": getattr(request.state, "request_id", None),
        }
        self.logger.info(
            "request started",
            extra={**context, "method": request.method, "path": request.url.path},
        )

        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        self.logger.info(
            "request completed",
            extra={
                **context,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "status_text": _STATUS_PHRASES.get(response.status_code, ""),
                "duration_ms": round(duration_ms, 3),
            },
        )
        return response
