"""
Foster management for administrators.

Creates and edits go through the same date checks as the public API;
a violation is answered with 400 and the reason.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.exceptions import NotFoundError
from ...schemas.common import AdminPage
from ...schemas.foster import (
    FosterAdminCreate,
    FosterFormOptions,
    FosterRead,
    FosterSortOrder,
    FosterUpdate,
)
from ...services.client_service import ClientService
from ...services.foster_service import FosterService
from ...services.pet_service import PetService
from ..deps import PageParams, unwrap
from .sorting import next_sort_orders


router = APIRouter()


@router.get("", response_model=AdminPage[FosterRead])
async def list_fosters(
    search_string: Optional[str] = Query(None, alias="searchString"),
    start_date_gte: Optional[date] = Query(None, alias="startDate_gte"),
    start_date_lt: Optional[date] = Query(None, alias="startDate_lt"),
    end_date_gte: Optional[date] = Query(None, alias="endDate_gte"),
    end_date_lt: Optional[date] = Query(None, alias="endDate_lt"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    pet_id: Optional[int] = Query(None, alias="petId"),
    sort_order: Optional[FosterSortOrder] = Query(None, alias="sortOrder"),
    paging: PageParams = Depends(),
) -> AdminPage[FosterRead]:
    page = await FosterService.list_fosters(
        search_string=search_string,
        start_date_gte=start_date_gte,
        start_date_lt=start_date_lt,
        end_date_gte=end_date_gte,
        end_date_lt=end_date_lt,
        client_id=client_id,
        pet_id=pet_id,
        sort_order=sort_order,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return AdminPage[FosterRead].from_list(
        page,
        sort_order=sort_order.value if sort_order else None,
        next_sort=next_sort_orders(FosterSortOrder, sort_order),
    )


@router.get("/options", response_model=FosterFormOptions)
async def foster_form_options() -> FosterFormOptions:
    """Clients and pets to choose from when creating or editing a foster."""
    return FosterFormOptions(
        clients=await ClientService.get_all_clients(),
        pets=await PetService.get_all_pets(),
    )


@router.get("/{foster_id}", response_model=FosterRead)
async def foster_details(foster_id: int) -> FosterRead:
    try:
        return await FosterService.get_foster(foster_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("", response_model=FosterRead, status_code=status.HTTP_201_CREATED)
async def create_foster(foster: FosterAdminCreate) -> FosterRead:
    try:
        result = await FosterService.create_foster(foster)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return unwrap(result)


@router.put("/{foster_id}", response_model=FosterRead)
async def update_foster(foster_id: int, foster: FosterUpdate) -> FosterRead:
    try:
        result = await FosterService.update_foster(foster_id, foster)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return unwrap(result)


@router.delete("/{foster_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_foster(foster_id: int) -> None:
    try:
        await FosterService.delete_foster(foster_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
