"""
Session load-and-commit middleware
"""
from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from user_service.core.exceptions import AppException
from user_service.domains.auth.session import SessionManager, SessionStatus
from user_service.middleware.error_handler import app_exception_handler


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Hydrate `request.state.session` from the session cookie before the
    handler runs, and write back whatever the handler changed afterwards

    Store access runs in the threadpool so a slow backend never stalls the loop.
    Store failures here happen outside the router's exception handling, so they
    are rendered in place and still pass back through the outer middleware.
    """

    def __init__(self, app: ASGIApp, manager: SessionManager):
        super().__init__(app)
        self.manager = manager

    async def dispatch(self, request: Request, call_next):
        token = request.cookies.get(self.manager.cookie_name)
        try:
            session = await run_in_threadpool(self.manager.load, token)
        except AppException as e:
            return await app_exception_handler(request, e)
        request.state.session = session

        response: Response = await call_next(request)

        try:
            if session.status is SessionStatus.MODIFIED:
                await run_in_threadpool(self.manager.commit, session)
                self.manager.write_cookie(response, session)
            elif session.status is SessionStatus.DESTROYED:
                self.manager.expire_cookie(response)
        except AppException as e:
            response = await app_exception_handler(request, e)

        response.headers.append("Vary", "Cookie")
        return response
