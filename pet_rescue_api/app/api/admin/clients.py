"""
Client management for administrators.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.exceptions import NotFoundError
from ...schemas.client import (
    ClientCreate,
    ClientFormOptions,
    ClientRead,
    ClientSortOrder,
    ClientUpdate,
)
from ...schemas.common import AdminPage
from ...services.client_service import ClientService
from ...services.user_service import UserService
from ..deps import PageParams, unwrap
from .sorting import next_sort_orders


router = APIRouter()


@router.get("", response_model=AdminPage[ClientRead])
async def list_clients(
    search_string: Optional[str] = Query(None, alias="searchString"),
    has_user: Optional[bool] = Query(None, alias="hasUser"),
    sort_order: Optional[ClientSortOrder] = Query(None, alias="sortOrder"),
    paging: PageParams = Depends(),
) -> AdminPage[ClientRead]:
    """List clients.

    - **searchString** - substring of name, address, phone, description
      or linked user email, or the exact linked user id.
    - **hasUser** - only clients with (true) or without (false) an account.
    """
    page = await ClientService.list_clients(
        search_string=search_string,
        has_user=has_user,
        sort_order=sort_order,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return AdminPage[ClientRead].from_list(
        page,
        sort_order=sort_order.value if sort_order else None,
        next_sort=next_sort_orders(ClientSortOrder, sort_order),
    )


@router.get("/options", response_model=ClientFormOptions)
async def client_form_options() -> ClientFormOptions:
    """User accounts a client can be linked to."""
    return ClientFormOptions(users=await UserService.get_all_users())


@router.get("/{client_id}", response_model=ClientRead)
async def client_details(client_id: int) -> ClientRead:
    try:
        return await ClientService.get_client(client_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(client: ClientCreate) -> ClientRead:
    return unwrap(await ClientService.create_client(client))


@router.put("/{client_id}", response_model=ClientRead)
async def update_client(client_id: int, client: ClientUpdate) -> ClientRead:
    return unwrap(await ClientService.update_client(client_id, client))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int) -> None:
    try:
        await ClientService.delete_client(client_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
