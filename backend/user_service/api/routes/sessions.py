"""
Login session API endpoints
Cookie-based login and logout
"""
from fastapi import APIRouter, Response, status

from user_service.api.deps import (
    AuditDep,
    AuthServiceDep,
    ClientIPDep,
    SessionDep,
    SessionManagerDep,
)
from user_service.domains.auth.schemas import LoginRequest

router = APIRouter(tags=["sessions"])


@router.post("/session", status_code=status.HTTP_200_OK)
@router.post("/sessions", status_code=status.HTTP_200_OK, include_in_schema=False)
def create_session(
    login_in: LoginRequest,
    session: SessionDep,
    session_manager: SessionManagerDep,
    auth_service: AuthServiceDep,
    ip_address: ClientIPDep
) -> Response:
    """
    Log in with email and password.

    Sets the session cookie; the body is empty. The session token is rotated
    on every successful login.
    """
    user = auth_service.authenticate(
        email=login_in.email,
        password=login_in.password,
        ip_address=ip_address
    )

    session_manager.renew_token(session)
    session.put("user_id", user.id)

    return Response(status_code=status.HTTP_200_OK)


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(
    session: SessionDep,
    session_manager: SessionManagerDep,
    audit: AuditDep,
    ip_address: ClientIPDep
) -> Response:
    """
    Log out: drop the server-side session and expire the cookie.
    """
    user_id = session.get_int("user_id")
    session_manager.destroy(session)
    audit.log_logout(user_id=user_id or None, ip_address=ip_address)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
