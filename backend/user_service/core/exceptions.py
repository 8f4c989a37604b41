"""
Custom exceptions and error codes for the application
Separates user-facing messages from internal logging
"""
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    """Standard error codes for the application"""

    # Request decoding (1xxx)
    MALFORMED_REQUEST = "REQ_1001"

    # Validation (2xxx)
    INVALID_INPUT = "VAL_2001"

    # Storage (3xxx)
    DATABASE_ERROR = "DB_3001"
    RECORD_NOT_FOUND = "DB_3002"
    DUPLICATE_RECORD = "DB_3003"

    # Authentication (4xxx)
    INVALID_CREDENTIALS = "AUTH_4001"
    NOT_AUTHENTICATED = "AUTH_4002"

    # Internal Errors (9xxx)
    INTERNAL_SERVER_ERROR = "SYS_9001"
    HASHING_FAILED = "SYS_9002"


class AppException(Exception):
    """
    Base exception for application errors

    Separates user-facing message from internal details:
    - user_message: Safe message shown to users
    - internal_message: Detailed message for logs (may contain sensitive info)
    - error_code: Standard error code for tracking
    """

    def __init__(
        self,
        user_message: str,
        error_code: ErrorCode,
        internal_message: Optional[str] = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    ):
        self.user_message = user_message
        self.internal_message = internal_message or user_message
        self.error_code = error_code
        self.status_code = status_code

        super().__init__(self.internal_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response"""
        return {"error": self.user_message}


class MalformedRequestError(AppException):
    """Request body could not be decoded"""
    def __init__(
        self,
        user_message: str = "malformed request body",
        internal_message: Optional[str] = None
    ):
        super().__init__(
            user_message=user_message,
            error_code=ErrorCode.MALFORMED_REQUEST,
            internal_message=internal_message,
            status_code=status.HTTP_400_BAD_REQUEST
        )


class ValidationError(AppException):
    """Entity failed validation"""
    def __init__(
        self,
        user_message: str,
        field: Optional[str] = None,
        internal_message: Optional[str] = None
    ):
        self.field = field
        if field:
            user_message = f"{field}: {user_message}"
        super().__init__(
            user_message=user_message,
            error_code=ErrorCode.INVALID_INPUT,
            internal_message=internal_message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
        )


class DuplicateRecordError(AppException):
    """Unique key already taken"""
    def __init__(
        self,
        user_message: str = "email: already taken",
        internal_message: Optional[str] = None
    ):
        super().__init__(
            user_message=user_message,
            error_code=ErrorCode.DUPLICATE_RECORD,
            internal_message=internal_message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
        )


class AuthenticationError(AppException):
    """Authentication failed"""
    def __init__(
        self,
        user_message: str = "not authenticated",
        error_code: ErrorCode = ErrorCode.NOT_AUTHENTICATED,
        internal_message: Optional[str] = None
    ):
        super().__init__(
            user_message=user_message,
            error_code=error_code,
            internal_message=internal_message,
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class InvalidCredentialsError(AuthenticationError):
    """Email lookup miss or password mismatch, deliberately indistinguishable"""
    def __init__(self, internal_message: Optional[str] = None):
        super().__init__(
            user_message="incorrect email or password",
            error_code=ErrorCode.INVALID_CREDENTIALS,
            internal_message=internal_message
        )


class DatabaseError(AppException):
    """Database operation failed"""
    def __init__(
        self,
        user_message: str = "storage error",
        internal_message: Optional[str] = None
    ):
        super().__init__(
            user_message=user_message,
            error_code=ErrorCode.DATABASE_ERROR,
            internal_message=internal_message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


class RecordNotFoundError(AppException):
    """Record not found; internal only, mapped before it reaches a client"""
    def __init__(
        self,
        user_message: str = "record not found",
        resource: Optional[str] = None
    ):
        self.resource = resource
        super().__init__(
            user_message=user_message,
            error_code=ErrorCode.RECORD_NOT_FOUND,
            internal_message=f"{resource} not found" if resource else None,
            status_code=status.HTTP_404_NOT_FOUND
        )


class HashingError(AppException):
    """Password hashing failed"""
    def __init__(self, internal_message: Optional[str] = None):
        super().__init__(
            user_message="internal server error",
            error_code=ErrorCode.HASHING_FAILED,
            internal_message=internal_message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


# Helper function to convert standard HTTPException to AppException
def http_exception_to_app_exception(exc: HTTPException) -> AppException:
    """Convert FastAPI HTTPException to AppException"""

    status_to_error_code = {
        400: ErrorCode.MALFORMED_REQUEST,
        401: ErrorCode.NOT_AUTHENTICATED,
        404: ErrorCode.RECORD_NOT_FOUND,
        422: ErrorCode.INVALID_INPUT,
        500: ErrorCode.INTERNAL_SERVER_ERROR,
    }

    error_code = status_to_error_code.get(exc.status_code, ErrorCode.INTERNAL_SERVER_ERROR)

    return AppException(
        user_message=str(exc.detail),
        error_code=error_code,
        status_code=exc.status_code
    )
