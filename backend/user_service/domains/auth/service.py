"""
Authentication domain service
Business logic layer for registration, login and session-user resolution
"""
from typing import Optional

from user_service.core.audit import AuditService
from user_service.core.exceptions import (
    AuthenticationError,
    InvalidCredentialsError,
    RecordNotFoundError,
)

from .models import User
from .repository import UserRepository


class AuthService:
    """
    Authentication service implementing business logic
    Sits between the HTTP handlers and the user repository
    """

    def __init__(self, user_repo: UserRepository, audit: AuditService):
        """
        Initialize auth service with dependencies

        Args:
            user_repo: Any UserRepository implementation
            audit: Audit event logger
        """
        self.user_repo = user_repo
        self.audit = audit

    def register(self, email: str, password: str, ip_address: Optional[str] = None) -> User:
        """
        Create a user and return it sanitized

        Raises:
            ValidationError: If email or password break the entity rules
            DuplicateRecordError: If the email is taken
            DatabaseError: If the store fails
        """
        user = User(email=email, password=password)
        self.user_repo.create(user)
        user.sanitize()

        self.audit.log_user_created(user_id=user.id, email=user.email, ip_address=ip_address)
        return user

    def authenticate(self, email: str, password: str, ip_address: Optional[str] = None) -> User:
        """
        Check credentials

        An unknown email and a wrong password raise the same client-facing
        error; only the audit log and internal message tell them apart.

        Raises:
            InvalidCredentialsError: On lookup miss or password mismatch
        """
        try:
            user = self.user_repo.find_by_email(email)
        except RecordNotFoundError as e:
            self.audit.log_login_failed(email=email, ip_address=ip_address, reason="unknown_email")
            raise InvalidCredentialsError(internal_message="no user with this email") from e

        if not user.compare_password(password):
            self.audit.log_login_failed(email=email, ip_address=ip_address, reason="password_mismatch")
            raise InvalidCredentialsError(internal_message=f"password mismatch for user {user.id}")

        user.sanitize()
        self.audit.log_login_success(user_id=user.id, email=user.email, ip_address=ip_address)
        return user

    def resolve(self, user_id: int) -> User:
        """
        Load the user a session points at

        Raises:
            AuthenticationError: If user_id is unset or no longer resolves
        """
        if not user_id:
            raise AuthenticationError(internal_message="no user_id in session")

        try:
            user = self.user_repo.find(user_id)
        except RecordNotFoundError as e:
            raise AuthenticationError(
                internal_message=f"session user {user_id} no longer exists"
            ) from e

        user.sanitize()
        return user
