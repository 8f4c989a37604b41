from typing import Annotated, Optional

from fastapi import Depends, Request

from user_service.core.audit import AuditService
from user_service.core.exceptions import AuthenticationError
from user_service.domains.auth.models import User
from user_service.domains.auth.repository import UserRepository
from user_service.domains.auth.service import AuthService
from user_service.domains.auth.session import SessionData, SessionManager


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.user_repository


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_audit_service(request: Request) -> AuditService:
    return request.app.state.audit


def get_session(request: Request) -> SessionData:
    session = getattr(request.state, "session", None)
    if not isinstance(session, SessionData):
        raise RuntimeError("SessionMiddleware is not installed; request has no session")
    return session


def get_client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]
SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
AuditDep = Annotated[AuditService, Depends(get_audit_service)]
SessionDep = Annotated[SessionData, Depends(get_session)]
ClientIPDep = Annotated[Optional[str], Depends(get_client_ip)]


def get_auth_service(user_repo: UserRepositoryDep, audit: AuditDep) -> AuthService:
    return AuthService(user_repo, audit)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_current_user(
    request: Request,
    session: SessionDep,
    auth_service: AuthServiceDep,
    audit: AuditDep,
    ip_address: ClientIPDep
) -> User:
    """Auth gate: resolve the session's user_id to a User or raise 401"""
    user_id = session.get_int("user_id")
    try:
        return auth_service.resolve(user_id)
    except AuthenticationError as e:
        audit.log_unauthorized_access(
            path=request.url.path, ip_address=ip_address, reason=e.internal_message
        )
        raise


CurrentUser = Annotated[User, Depends(get_current_user)]
