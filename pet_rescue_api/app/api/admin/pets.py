"""
Pet management for administrators.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.exceptions import NotFoundError
from ...schemas.common import AdminPage
from ...schemas.foster import PetDetails
from ...schemas.pet import (
    AnimalGender,
    AnimalSpecies,
    PetCreate,
    PetRead,
    PetSortOrder,
    PetUpdate,
)
from ...services.foster_service import FosterService
from ...services.pet_service import PetService
from ..deps import PageParams, unwrap
from .sorting import next_sort_orders


router = APIRouter()


@router.get("", response_model=AdminPage[PetRead])
async def list_pets(
    search_string: Optional[str] = Query(None, alias="searchString"),
    animal_species: Optional[AnimalSpecies] = Query(None, alias="animalSpecies"),
    animal_gender: Optional[AnimalGender] = Query(None, alias="animalGender"),
    age_gte: Optional[int] = Query(None, ge=0),
    age_lte: Optional[int] = Query(None, ge=0),
    sort_order: Optional[PetSortOrder] = Query(None, alias="sortOrder"),
    paging: PageParams = Depends(),
) -> AdminPage[PetRead]:
    page = await PetService.list_pets(
        search_string=search_string,
        species=animal_species,
        gender=animal_gender,
        age_gte=age_gte,
        age_lte=age_lte,
        sort_order=sort_order,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return AdminPage[PetRead].from_list(
        page,
        sort_order=sort_order.value if sort_order else None,
        next_sort=next_sort_orders(PetSortOrder, sort_order),
    )


@router.get("/{pet_id}", response_model=PetDetails)
async def pet_details(pet_id: int) -> PetDetails:
    """A pet and the foster it is currently in, if any."""
    try:
        pet = await PetService.get_pet(pet_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    active = await FosterService.get_active_foster_for_pet(pet_id)
    return PetDetails(pet=pet, active_foster=active)


@router.post("", response_model=PetRead, status_code=status.HTTP_201_CREATED)
async def create_pet(pet: PetCreate) -> PetRead:
    return await PetService.create_pet(pet)


@router.put("/{pet_id}", response_model=PetRead)
async def update_pet(pet_id: int, pet: PetUpdate) -> PetRead:
    """Replace a pet.  Send the ``version`` last read to detect concurrent edits (409)."""
    return unwrap(await PetService.update_pet(pet_id, pet))


@router.delete("/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pet(pet_id: int) -> None:
    try:
        await PetService.delete_pet(pet_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
