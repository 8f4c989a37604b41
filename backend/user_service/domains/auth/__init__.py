"""
Authentication domain
Handles users, credential checks, and cookie sessions
"""
from .cache import MemorySessionStore, RedisSessionStore, SessionStore
from .models import User, UserRecord
from .repository import InMemoryUserRepository, SQLUserRepository, UserRepository
from .schemas import LoginRequest, UserCreate, UserPublic
from .service import AuthService
from .session import SessionData, SessionManager, SessionStatus

__all__ = [
    # Models
    "User",
    "UserRecord",
    # Schemas
    "UserCreate",
    "LoginRequest",
    "UserPublic",
    # Service
    "AuthService",
    # Repositories
    "UserRepository",
    "SQLUserRepository",
    "InMemoryUserRepository",
    # Sessions
    "SessionStore",
    "MemorySessionStore",
    "RedisSessionStore",
    "SessionManager",
    "SessionData",
    "SessionStatus",
]
