"""
Profile endpoints for the signed-in API user.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ....core.exceptions import DuplicateError, NotFoundError
from ....core.security import get_current_user
from ....schemas.user import UserRead, UserSelfUpdate
from ....services.user_service import UserService
from ...deps import unwrap


router = APIRouter()


@router.get("/me", response_model=UserRead)
async def read_me(current_user: Dict[str, Any] = Depends(get_current_user)) -> UserRead:
    try:
        return await UserService.get_user(current_user["user_id"])
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.patch("/me", response_model=UserRead)
async def update_me(
    updates: UserSelfUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> UserRead:
    """Change email, name or phone.  Fields left out stay unchanged."""
    try:
        result = await UserService.update_profile(current_user["user_id"], updates)
    except DuplicateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return unwrap(result)


@router.delete("/me")
async def delete_me(current_user: Dict[str, Any] = Depends(get_current_user)) -> dict:
    """Delete the account.  The linked client profile and its fosters are kept."""
    try:
        await UserService.delete_user(current_user["user_id"])
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"detail": "User deleted"}
