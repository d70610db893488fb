"""Helpers that create records through the service layer."""

import asyncio

from pet_rescue_api.app.schemas.client import ClientCreate
from pet_rescue_api.app.schemas.pet import PetCreate
from pet_rescue_api.app.services.client_service import ClientService
from pet_rescue_api.app.services.pet_service import PetService

PASSWORD = "Sup3rSecret"


def make_pet(name="Whiskers", species="Cat", gender="F", age=3, description=None):
    return asyncio.run(
        PetService.create_pet(
            PetCreate(name=name, species=species, gender=gender, age=age, description=description)
        )
    )


def make_client(name="Maria Popescu", **fields):
    return asyncio.run(ClientService.create_client(ClientCreate(name=name, **fields))).record
