from fastapi import APIRouter

from user_service.api.routes import private, sessions, users

api_router = APIRouter()
api_router.include_router(users.router)
api_router.include_router(sessions.router)
api_router.include_router(private.router)
