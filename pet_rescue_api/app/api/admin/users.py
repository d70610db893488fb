"""
User management for administrators.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.exceptions import DuplicateError, NotFoundError
from ...schemas.common import AdminPage
from ...schemas.user import UserCreate, UserRead, UserRole, UserSortOrder, UserUpdate
from ...services.user_service import UserService
from ..deps import PageParams, unwrap
from .sorting import next_sort_orders


router = APIRouter()


@router.get("", response_model=AdminPage[UserRead])
async def list_users(
    search_string: Optional[str] = Query(None, alias="searchString"),
    user_role: Optional[UserRole] = Query(None, alias="userRole"),
    sort_order: Optional[UserSortOrder] = Query(None, alias="sortOrder"),
    paging: PageParams = Depends(),
) -> AdminPage[UserRead]:
    page = await UserService.list_users(
        search_string=search_string,
        role=user_role,
        sort_order=sort_order,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return AdminPage[UserRead].from_list(
        page,
        sort_order=sort_order.value if sort_order else None,
        next_sort=next_sort_orders(UserSortOrder, sort_order),
    )


@router.get("/{user_id}", response_model=UserRead)
async def user_details(user_id: str) -> UserRead:
    try:
        return await UserService.get_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(user: UserCreate) -> UserRead:
    try:
        return await UserService.create_user(user)
    except DuplicateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.put("/{user_id}", response_model=UserRead)
async def update_user(user_id: str, user: UserUpdate) -> UserRead:
    try:
        result = await UserService.update_user(user_id, user)
    except DuplicateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return unwrap(result)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str) -> None:
    """Delete a user.  Clients linked to the user are kept and unlinked."""
    try:
        await UserService.delete_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
