"""
Public pet endpoints.

Pets can be browsed without signing in.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....core.exceptions import NotFoundError
from ....schemas.common import Page
from ....schemas.pet import AnimalGender, AnimalSpecies, PetRead, PetSortOrder
from ....services.pet_service import PetService
from ...deps import PageParams


router = APIRouter()


@router.get("", response_model=Page[PetRead])
async def list_pets(
    search_string: Optional[str] = Query(None, alias="searchString"),
    animal_species: Optional[AnimalSpecies] = Query(None, alias="animalSpecies"),
    animal_gender: Optional[AnimalGender] = Query(None, alias="animalGender"),
    age_gte: Optional[int] = Query(None, ge=0),
    age_lte: Optional[int] = Query(None, ge=0),
    sort_order: Optional[PetSortOrder] = Query(None, alias="sortOrder"),
    paging: PageParams = Depends(),
) -> Page[PetRead]:
    """List pets.

    - **searchString** - substring of name, species or description.
    - **animalSpecies**, **animalGender** - exact filters.
    - **age_gte**, **age_lte** - inclusive age bounds.
    - **sortOrder** - e.g. `name_asc`, `age_desc`; defaults to `id_asc`.
    """
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
    return Page[PetRead].from_list(page)


@router.get("/{pet_id}", response_model=PetRead)
async def get_pet(pet_id: int) -> PetRead:
    try:
        return await PetService.get_pet(pet_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
