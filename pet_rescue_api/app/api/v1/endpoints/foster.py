"""
Foster endpoints for the signed-in client.

A client sees and creates only its own fosters; a foster of another
client is reported as not found.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ....core.exceptions import NotFoundError
from ....schemas.client import ClientRead
from ....schemas.common import Page
from ....schemas.foster import FosterAdminCreate, FosterCreate, FosterRead
from ....services.foster_service import FosterService
from ...deps import PageParams, get_current_client, unwrap


router = APIRouter()


@router.get("", response_model=Page[FosterRead])
async def list_my_fosters(
    paging: PageParams = Depends(),
    client: ClientRead = Depends(get_current_client),
) -> Page[FosterRead]:
    page = await FosterService.list_fosters(
        client_id=client.id,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return Page[FosterRead].from_list(page)


@router.get("/{foster_id}", response_model=FosterRead)
async def get_my_foster(
    foster_id: int,
    client: ClientRead = Depends(get_current_client),
) -> FosterRead:
    try:
        return await FosterService.get_foster(foster_id, client_id=client.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("", response_model=FosterRead, status_code=status.HTTP_201_CREATED)
async def create_foster(
    payload: FosterCreate,
    client: ClientRead = Depends(get_current_client),
) -> FosterRead:
    """Request a foster of a pet for the signed-in client.

    Responds 400 with the reason when the dates are invalid or clash
    with another foster of the same pet.
    """
    data = FosterAdminCreate(client_id=client.id, **payload.model_dump())
    try:
        result = await FosterService.create_foster(data)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return unwrap(result)
