"""
Pydantic models for foster assignments.

Date rules (end after start, minimum length, no overlap with other
fosters of the same pet) are not enforced here: they are checked by
``services.foster_validation`` so that every violation is reported as a
structured rejection rather than a schema error.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .client import ClientRead
from .common import ApiModel
from .pet import PetRead


class FosterSortOrder(str, Enum):
    """Accepted values of the ``sortOrder`` query parameter for fosters."""

    ID_ASC = "id_asc"
    ID_DESC = "id_desc"
    START_DATE_ASC = "startDate_asc"
    START_DATE_DESC = "startDate_desc"
    END_DATE_ASC = "endDate_asc"
    END_DATE_DESC = "endDate_desc"
    CLIENT_ID_ASC = "clientId_asc"
    CLIENT_ID_DESC = "clientId_desc"
    PET_ID_ASC = "petId_asc"
    PET_ID_DESC = "petId_desc"


class FosterBase(ApiModel):
    description: Optional[str] = Field(None, min_length=3, max_length=100)
    start_date: date = Field(..., examples=["2024-01-01"])
    end_date: Optional[date] = Field(None, examples=["2024-02-01"])


class FosterCreate(FosterBase):
    """Request body for ``POST /api/foster``; the client is the caller."""

    pet_id: int


class FosterAdminCreate(FosterBase):
    """Request body for creating a foster from the admin screens."""

    client_id: int
    pet_id: int


class FosterUpdate(FosterAdminCreate):
    version: Optional[int] = None


class FosterRead(FosterBase):
    id: int
    # NULL once the referenced client or pet has been deleted.
    client_id: Optional[int] = None
    pet_id: Optional[int] = None
    version: int = 1
    client_name: Optional[str] = None
    pet_info: Optional[PetRead] = None


class PetDetails(ApiModel):
    """A pet together with the foster currently covering it, if any."""

    pet: PetRead
    active_foster: Optional[FosterRead] = None


class FosterFormOptions(ApiModel):
    """Choices offered by the admin foster form."""

    clients: List[ClientRead]
    pets: List[PetRead]
