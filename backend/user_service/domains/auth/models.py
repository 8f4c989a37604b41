"""
Authentication domain models
User entity with its validation and hashing rules, and the users table it maps to
"""
from typing import Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Field, SQLModel

from user_service.core.exceptions import HashingError, ValidationError
from user_service.core.security import PASSWORD_MAX_BYTES, get_password_hash, verify_password

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100

_email_adapter = TypeAdapter(EmailStr)


# =============================================================================
# Table model
# =============================================================================

class UserRecord(SQLModel, table=True):
    """users table row"""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True, nullable=False, max_length=255)
    encrypted_password: str = Field(nullable=False, max_length=255)


# =============================================================================
# Domain entity
# =============================================================================

class User(SQLModel):
    """
    User entity handed between handlers and repositories

    `password` is transient plaintext; `encrypted_password` is the stored hash.
    Neither is ever serialized.
    """
    id: int = 0
    email: str = ""
    password: str = Field(default="", exclude=True, repr=False)
    encrypted_password: str = Field(default="", exclude=True, repr=False)

    def validate_user(self) -> None:
        """
        Check email format and password rules

        Raises:
            ValidationError: If email is missing or malformed, or the password
                is required but absent, outside the allowed length, or longer than the
                hash can represent
        """
        if not self.email:
            raise ValidationError("cannot be blank", field="email")

        try:
            normalized = _email_adapter.validate_python(self.email)
        except PydanticValidationError as e:
            raise ValidationError(
                "must be a valid email address",
                field="email",
                internal_message=str(e)
            ) from e

        # EmailStr also accepts "Name <addr>" and padded input; only a bare address is stored
        if normalized.casefold() != self.email.casefold():
            raise ValidationError(
                "must be a valid email address",
                field="email",
                internal_message=f"email normalizes to a different address: {normalized}"
            )

        if not self.password:
            if not self.encrypted_password:
                raise ValidationError("cannot be blank", field="password")
            return

        if not PASSWORD_MIN_LENGTH <= len(self.password) <= PASSWORD_MAX_LENGTH:
            raise ValidationError(
                f"the length must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH}",
                field="password"
            )

        if len(self.password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValidationError(
                f"must be at most {PASSWORD_MAX_BYTES} bytes", field="password"
            )

    def before_create(self) -> None:
        """Hash `password` into `encrypted_password` when a plaintext is present"""
        if not self.password:
            return
        try:
            self.encrypted_password = get_password_hash(self.password)
        except (ValueError, TypeError) as e:
            raise HashingError(internal_message=f"password hashing failed: {e}") from e

    def sanitize(self) -> None:
        self.password = ""

    def compare_password(self, password: str) -> bool:
        if not password or not self.encrypted_password:
            return False
        try:
            return verify_password(password, self.encrypted_password)
        except ValueError:
            # Stored value is not a recognizable hash
            return False

    @classmethod
    def from_record(cls, record: UserRecord) -> "User":
        return cls(
            id=record.id or 0,
            email=record.email,
            encrypted_password=record.encrypted_password,
        )
