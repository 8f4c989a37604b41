"""
Audit logging module
Logs security-relevant events for compliance and monitoring
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class AuditEventType(str, Enum):
    """Audit event types"""
    # Authentication events
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    UNAUTHORIZED_ACCESS = "unauthorized_access"

    # User events
    USER_CREATED = "user_created"


def mask_email(email: str) -> str:
    """Keep the first character of the local part and the domain"""
    local, sep, domain = email.partition("@")
    if not sep or not local:
        return "***"
    return f"{local[0]}***@{domain}"


class AuditService:
    """Service for audit logging"""

    def __init__(self, logger: logging.Logger):
        """
        Initialize audit service

        Args:
            logger: Parent application logger; events go to its "audit" child
        """
        self.logger = logger.getChild("audit")

    def log_event(
        self,
        event_type: AuditEventType,
        user_id: Optional[int] = None,
        email: Optional[str] = None,
        ip_address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        success: bool = True
    ) -> None:
        """
        Log an audit event

        Args:
            event_type: Type of event
            user_id: User ID (if applicable)
            email: Email address (if applicable), masked before logging
            ip_address: Client IP address
            details: Additional event details
            success: Whether the event was successful
        """
        event_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type.value,
            "success": success,
        }

        if user_id:
            event_data["user_id"] = user_id

        if email:
            event_data["email"] = mask_email(email)

        if ip_address:
            event_data["ip_address"] = ip_address

        if details:
            event_data["details"] = details

        self.logger.info(event_type.value, extra={"audit": event_data})

    def log_login_success(self, user_id: int, email: str, ip_address: Optional[str]) -> None:
        """Log successful login"""
        self.log_event(
            event_type=AuditEventType.LOGIN_SUCCESS,
            user_id=user_id,
            email=email,
            ip_address=ip_address,
            success=True
        )

    def log_login_failed(self, email: str, ip_address: Optional[str], reason: str) -> None:
        """Log failed login attempt; reason stays server-side"""
        self.log_event(
            event_type=AuditEventType.LOGIN_FAILED,
            email=email,
            ip_address=ip_address,
            details={"reason": reason},
            success=False
        )

    def log_logout(self, user_id: Optional[int], ip_address: Optional[str]) -> None:
        self.log_event(
            event_type=AuditEventType.LOGOUT,
            user_id=user_id,
            ip_address=ip_address,
            success=True
        )

    def log_unauthorized_access(self, path: str, ip_address: Optional[str], reason: str) -> None:
        self.log_event(
            event_type=AuditEventType.UNAUTHORIZED_ACCESS,
            ip_address=ip_address,
            details={"path": path, "reason": reason},
            success=False
        )

    def log_user_created(self, user_id: int, email: str, ip_address: Optional[str]) -> None:
        """Log new user creation"""
        self.log_event(
            event_type=AuditEventType.USER_CREATED,
            user_id=user_id,
            email=email,
            ip_address=ip_address,
            success=True
        )
