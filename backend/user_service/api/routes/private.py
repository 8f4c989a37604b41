from typing import Any

from fastapi import APIRouter, Depends

from user_service.api.deps import CurrentUser, get_current_user
from user_service.domains.auth.schemas import UserPublic

# Every route here sits behind the auth gate
router = APIRouter(tags=["private"], dependencies=[Depends(get_current_user)])


@router.get("/private/whoami", response_model=UserPublic)
def whoami(current_user: CurrentUser) -> Any:
    """
    Get the user the session cookie belongs to.
    """
    return current_user


@router.get("/me", response_model=UserPublic)
def read_user_me(current_user: CurrentUser) -> Any:
    """
    Get current user.
    """
    return current_user
