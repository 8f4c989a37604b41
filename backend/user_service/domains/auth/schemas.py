"""
Authentication domain schemas (Request/Response models)
Pydantic models for API requests and responses
"""
from sqlmodel import SQLModel


class UserCreate(SQLModel):
    """Create user request; field rules are checked by the User entity"""
    email: str = ""
    password: str = ""


class LoginRequest(SQLModel):
    """Email/password login request"""
    email: str = ""
    password: str = ""


class UserPublic(SQLModel):
    """Public user information"""
    id: int
    email: str
