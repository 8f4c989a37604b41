import logging
from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from user_service.core import security
from user_service.core.audit import AuditService
from user_service.core.config import Settings
from user_service.core.db import init_db, make_engine
from user_service.domains.auth.cache import MemorySessionStore
from user_service.domains.auth.repository import (
    InMemoryUserRepository,
    SQLUserRepository,
    UserRepository,
)
from user_service.domains.auth.service import AuthService
from user_service.domains.auth.session import SessionManager
from user_service.main import create_app
from user_service.tests.utils.log_capture import ListHandler


@pytest.fixture(scope="session", autouse=True)
def fast_password_hashing() -> Generator[None, None, None]:
    """bcrypt at minimum cost; production rounds make the suite crawl"""
    security.pwd_context.update(bcrypt__rounds=4)
    yield


@pytest.fixture(scope="function")
def log_records() -> ListHandler:
    return ListHandler()


@pytest.fixture(scope="function")
def logger(log_records: ListHandler) -> Generator[logging.Logger, None, None]:
    test_logger = logging.getLogger("user_service.test")
    test_logger.setLevel(logging.DEBUG)
    test_logger.propagate = False
    test_logger.addHandler(log_records)
    yield test_logger
    test_logger.removeHandler(log_records)


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    sqlite_engine = make_engine("sqlite://")
    init_db(sqlite_engine)
    yield sqlite_engine
    sqlite_engine.dispose()


@pytest.fixture(scope="function", params=["memory", "sql"])
def user_repository(request: pytest.FixtureRequest) -> UserRepository:
    """Every repository test runs against both backends"""
    if request.param == "sql":
        return SQLUserRepository(request.getfixturevalue("engine"))
    return InMemoryUserRepository()


@pytest.fixture(scope="function")
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture(scope="function")
def session_manager(session_store: MemorySessionStore) -> SessionManager:
    return SessionManager(session_store)


@pytest.fixture(scope="function")
def auth_service(user_repository: UserRepository, logger: logging.Logger) -> AuthService:
    return AuthService(user_repository, AuditService(logger))


@pytest.fixture(scope="function")
def app(
    user_repository: UserRepository,
    session_manager: SessionManager,
    logger: logging.Logger
) -> FastAPI:
    return create_app(
        settings=Settings(STORE_BACKEND="memory", ENVIRONMENT="local"),
        user_repository=user_repository,
        session_manager=session_manager,
        logger=logger,
    )


@pytest.fixture(scope="function")
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
