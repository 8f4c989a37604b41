"""
CORS middleware
"""
from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"


class CORSMiddleware(BaseHTTPMiddleware):
    """
    Add permissive CORS headers to all responses

    Any OPTIONS request is answered here with 204 and never reaches routing.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_origin: str = "*",
        allow_methods: str = ALLOWED_METHODS,
        allow_headers: str = ALLOWED_HEADERS
    ):
        super().__init__(app)
        self.cors_headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": allow_methods,
            "Access-Control-Allow-Headers": allow_headers,
        }

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_204_NO_CONTENT, headers=self.cors_headers)

        response: Response = await call_next(request)
        response.headers.update(self.cors_headers)
        return response
