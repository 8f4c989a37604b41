import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from redis import Redis
from sqlalchemy.engine import Engine

from user_service.api.main import api_router
from user_service.core.audit import AuditService
from user_service.core.config import Settings, settings as default_settings
from user_service.core.db import init_db, make_engine
from user_service.core.logging import setup_logging
from user_service.domains.auth.cache import MemorySessionStore, RedisSessionStore, SessionStore
from user_service.domains.auth.repository import (
    InMemoryUserRepository,
    SQLUserRepository,
    UserRepository,
)
from user_service.domains.auth.session import SessionManager
from user_service.middleware.error_handler import setup_exception_handlers
from user_service.middleware.request import AccessLogMiddleware, RequestIDMiddleware
from user_service.middleware.security import CORSMiddleware
from user_service.middleware.session import SessionMiddleware


def build_session_manager(settings: Settings) -> SessionManager:
    store: SessionStore
    if settings.SESSION_BACKEND == "redis":
        store = RedisSessionStore(Redis.from_url(settings.REDIS_URL))
    else:
        store = MemorySessionStore()

    return SessionManager(
        store,
        lifetime=timedelta(hours=settings.SESSION_LIFETIME_HOURS),
        cookie_name=settings.SESSION_COOKIE_NAME,
        cookie_secure=settings.SESSION_COOKIE_SECURE,
    )


def create_app(
    settings: Optional[Settings] = None,
    user_repository: Optional[UserRepository] = None,
    session_manager: Optional[SessionManager] = None,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """
    Build the application

    Collaborators not passed in are built from settings, so tests can swap
    in an in-memory repository or session store without touching config.
    """
    settings = settings or default_settings
    logger = logger or setup_logging(settings.LOG_LEVEL)

    engine: Optional[Engine] = None
    if user_repository is None:
        if settings.STORE_BACKEND == "sql":
            engine = make_engine(settings.SQLALCHEMY_DATABASE_URI)
            user_repository = SQLUserRepository(engine)
        else:
            user_repository = InMemoryUserRepository()

    session_manager = session_manager or build_session_manager(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if engine is not None:
            init_db(engine)
        logger.info(
            "starting api server",
            extra={
                "environment": settings.ENVIRONMENT,
                "store_backend": type(user_repository).__name__,
                "session_backend": type(session_manager.store).__name__,
            },
        )
        yield
        if engine is not None:
            engine.dispose()
        logger.info("api server stopped")

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.logger = logger
    app.state.user_repository = user_repository
    app.state.session_manager = session_manager
    app.state.audit = AuditService(logger)

    setup_exception_handlers(app)

    # Last added runs first: request id -> access log -> CORS -> session -> router
    app.add_middleware(SessionMiddleware, manager=session_manager)
    app.add_middleware(CORSMiddleware)
    app.add_middleware(AccessLogMiddleware, logger=logger)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(api_router)

    return app


app = create_app()
