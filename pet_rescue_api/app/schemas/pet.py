"""
Pydantic models for pet data.

``PetBase`` contains the shared fields; ``PetCreate`` is the request
body for new pets, ``PetUpdate`` adds the optional expected ``version``
used for optimistic concurrency, and ``PetRead`` is the response.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from .common import ApiModel


class AnimalSpecies(str, Enum):
    CAT = "Cat"
    DOG = "Dog"
    RODENT = "Rodent"
    BIRD = "Bird"
    SNAKE = "Snake"
    LIZARD = "Lizard"
    OTHER = "Other"


class AnimalGender(str, Enum):
    M = "M"
    F = "F"


class PetSortOrder(str, Enum):
    """Accepted values of the ``sortOrder`` query parameter for pets."""

    ID_ASC = "id_asc"
    ID_DESC = "id_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    SPECIES_ASC = "species_asc"
    SPECIES_DESC = "species_desc"
    GENDER_ASC = "gender_asc"
    GENDER_DESC = "gender_desc"
    AGE_ASC = "age_asc"
    AGE_DESC = "age_desc"


class PetBase(ApiModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Whiskers"])
    species: AnimalSpecies = Field(..., examples=["Cat"])
    gender: AnimalGender = Field(..., examples=["F"])
    age: Optional[int] = Field(None, ge=0, le=30, examples=[3])
    description: Optional[str] = Field(None, examples=["Shy but friendly tabby"])


class PetCreate(PetBase):
    """Schema for creating a pet."""
    pass


class PetUpdate(PetBase):
    """Schema for editing a pet.

    All pet fields are replaced.  When ``version`` is given the edit is
    rejected with a conflict if the pet changed since it was read.
    """

    version: Optional[int] = None


class PetRead(PetBase):
    """Schema for reading a pet from the API."""

    id: int
    version: int = 1
