from typing import Any

from fastapi import APIRouter, status

from user_service.api.deps import AuthServiceDep, ClientIPDep
from user_service.domains.auth.schemas import UserCreate, UserPublic

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserPublic)
def create_user(
    user_in: UserCreate,
    auth_service: AuthServiceDep,
    ip_address: ClientIPDep
) -> Any:
    """
    Register a new user.

    - **email**: valid email address, unique
    - **password**: 6 to 100 characters
    """
    return auth_service.register(
        email=user_in.email,
        password=user_in.password,
        ip_address=ip_address
    )
