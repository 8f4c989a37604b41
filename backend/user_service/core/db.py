from typing import Any, Dict

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# Table models must be imported before create_all sees the metadata
from user_service.domains.auth.models import UserRecord  # noqa: F401


def make_engine(database_uri: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads"""
    kwargs: Dict[str, Any] = {"pool_pre_ping": True}
    if database_uri.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_uri in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_uri, **kwargs)


def init_db(engine: Engine) -> None:
    """Create the users table if missing; schema migrations are handled outside the service"""
    SQLModel.metadata.create_all(engine)
