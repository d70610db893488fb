"""
Business logic for pets.

The ``PetService`` stores pets in the SQLite database and builds the
filtered, sorted and paged listing used by both the JSON API and the
admin screens.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.db import WriteStatus, delete_row, get_connection, update_row
from ..core.exceptions import NotFoundError
from ..core.paging import PaginatedList, paginate
from ..core.query import (
    SelectQuery,
    build_sort_table,
    enum_rank,
    eq,
    gte,
    icontains,
    lte,
    or_,
)
from ..schemas.pet import (
    AnimalGender,
    AnimalSpecies,
    PetCreate,
    PetRead,
    PetSortOrder,
    PetUpdate,
)
from .results import WriteResult

logger = logging.getLogger(__name__)

PET_COLUMNS = (
    "pets.id",
    "pets.name",
    "pets.species",
    "pets.gender",
    "pets.age",
    "pets.description",
    "pets.version",
)

PET_SORTS = build_sort_table(
    PetSortOrder,
    {
        "id": "pets.id",
        "name": "pets.name",
        # Enum columns sort by declaration order, not alphabetically.
        "species": enum_rank("pets.species", AnimalSpecies),
        "gender": enum_rank("pets.gender", AnimalGender),
        "age": "pets.age",
    },
    key_column="pets.id",
)


def row_to_pet(row: sqlite3.Row, prefix: str = "") -> PetRead:
    """Build a ``PetRead`` from a result row.

    ``prefix`` selects aliased columns when the pet was joined into
    another query (``pet_name``, ``pet_species`` ...).
    """
    return PetRead(
        id=row[f"{prefix}id"],
        name=row[f"{prefix}name"],
        species=row[f"{prefix}species"],
        gender=row[f"{prefix}gender"],
        age=row[f"{prefix}age"],
        description=row[f"{prefix}description"],
        version=row[f"{prefix}version"],
    )


def _fetch_pet(conn: sqlite3.Connection, pet_id: int) -> Optional[PetRead]:
    sql, params = SelectQuery("pets", PET_COLUMNS).where(eq("pets.id", pet_id)).to_sql()
    row = conn.execute(sql, tuple(params)).fetchone()
    return row_to_pet(row) if row else None


class PetService:
    """Service for pets."""

    @classmethod
    async def list_pets(
        cls,
        search_string: Optional[str] = None,
        species: Optional[AnimalSpecies] = None,
        gender: Optional[AnimalGender] = None,
        age_gte: Optional[int] = None,
        age_lte: Optional[int] = None,
        sort_order: Optional[PetSortOrder] = None,
        page_number: int = 1,
        page_size: int = 6,
    ) -> PaginatedList[PetRead]:
        """Return one page of pets matching the given filters.

        Parameters
        ----------
        search_string : Optional[str]
            Case-insensitive substring matched against name, species and
            description.
        species, gender : Optional[Enum]
            Exact matches.
        age_gte, age_lte : Optional[int]
            Inclusive age bounds.  Pets without an age never match a bound.
        sort_order : Optional[PetSortOrder]
            Defaults to ascending id.
        page_number, page_size : int
            1-based page index and page length.
        """
        query = SelectQuery("pets", PET_COLUMNS)
        if search_string:
            query.where(
                or_(
                    icontains("pets.name", search_string),
                    icontains("pets.species", search_string),
                    icontains("pets.description", search_string),
                )
            )
        if species is not None:
            query.where(eq("pets.species", AnimalSpecies(species).value))
        if gender is not None:
            query.where(eq("pets.gender", AnimalGender(gender).value))
        if age_gte is not None:
            query.where(gte("pets.age", age_gte))
        if age_lte is not None:
            query.where(lte("pets.age", age_lte))
        query.order_by(*PET_SORTS[sort_order or PetSortOrder.ID_ASC])

        conn = get_connection()
        try:
            return paginate(conn, query, page_number, page_size, row_to_pet)
        finally:
            conn.close()

    @classmethod
    async def get_all_pets(cls) -> List[PetRead]:
        """Return every pet ordered by name, e.g. for selection lists."""
        sql, params = (
            SelectQuery("pets", PET_COLUMNS)
            .order_by(*PET_SORTS[PetSortOrder.NAME_ASC])
            .to_sql()
        )
        conn = get_connection()
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
            return [row_to_pet(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_pet(cls, pet_id: int) -> PetRead:
        """Return the pet with the given id or raise ``NotFoundError``."""
        conn = get_connection()
        try:
            pet = _fetch_pet(conn, pet_id)
        finally:
            conn.close()
        if pet is None:
            raise NotFoundError(f"Pet {pet_id} not found")
        return pet

    @classmethod
    async def create_pet(cls, data: PetCreate) -> PetRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO pets (name, species, gender, age, description) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    data.name,
                    data.species.value,
                    data.gender.value,
                    data.age,
                    data.description,
                ),
            )
            pet_id = cursor.lastrowid
            conn.commit()
            logger.info("Created pet %s (%s)", pet_id, data.name)
            return _fetch_pet(conn, pet_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def update_pet(cls, pet_id: int, data: PetUpdate) -> WriteResult[PetRead]:
        """Replace the pet's fields.

        Returns ``CONFLICT`` when ``data.version`` is set and no longer
        matches the stored version.
        """
        conn = get_connection()
        try:
            status = update_row(
                conn.cursor(),
                "pets",
                pet_id,
                {
                    "name": data.name,
                    "species": data.species.value,
                    "gender": data.gender.value,
                    "age": data.age,
                    "description": data.description,
                },
                expected_version=data.version,
            )
            if status != WriteStatus.OK:
                conn.rollback()
                return WriteResult(status)
            conn.commit()
            logger.info("Updated pet %s", pet_id)
            return WriteResult.success(_fetch_pet(conn, pet_id))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def delete_pet(cls, pet_id: int) -> None:
        """Delete a pet; its fosters are kept with ``pet_id`` cleared."""
        conn = get_connection()
        try:
            if not delete_row(conn.cursor(), "pets", pet_id):
                raise NotFoundError(f"Pet {pet_id} not found")
            conn.commit()
            logger.info("Deleted pet %s", pet_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

