"""
Business logic for foster assignments.

Every insert and update runs the date checks of ``foster_validation``
against the other fosters of the same pet inside the write transaction.
The transaction is opened with ``BEGIN IMMEDIATE`` so two concurrent
writers cannot both pass the check and then insert overlapping fosters.
"""

import logging
import sqlite3
from datetime import date
from typing import List, Optional

from ..core.db import WriteStatus, delete_row, get_connection, row_exists, update_row
from ..core.exceptions import NotFoundError
from ..core.paging import PaginatedList, paginate
from ..core.query import (
    SelectQuery,
    build_sort_table,
    eq,
    gte,
    icontains,
    is_null,
    lt,
    lte,
    or_,
)
from ..schemas.foster import FosterAdminCreate, FosterRead, FosterSortOrder, FosterUpdate
from .foster_validation import FosterCandidate, validate_foster_dates
from .pet_service import row_to_pet
from .results import WriteResult

logger = logging.getLogger(__name__)

FOSTER_COLUMNS = (
    "fosters.id",
    "fosters.client_id",
    "fosters.pet_id",
    "fosters.description",
    "fosters.start_date",
    "fosters.end_date",
    "fosters.version",
    "c.name AS client_name",
    "p.name AS pet_name",
    "p.species AS pet_species",
    "p.gender AS pet_gender",
    "p.age AS pet_age",
    "p.description AS pet_description",
    "p.version AS pet_version",
)

FOSTER_JOINS = (
    "LEFT JOIN clients c ON c.id = fosters.client_id",
    "LEFT JOIN pets p ON p.id = fosters.pet_id",
)

FOSTER_SORTS = build_sort_table(
    FosterSortOrder,
    {
        "id": "fosters.id",
        "startDate": "fosters.start_date",
        "endDate": "fosters.end_date",
        "clientId": "fosters.client_id",
        "petId": "fosters.pet_id",
    },
    key_column="fosters.id",
)


def row_to_foster(row: sqlite3.Row) -> FosterRead:
    pet_info = None
    if row["pet_id"] is not None:
        pet_info = row_to_pet(row, prefix="pet_")
    return FosterRead(
        id=row["id"],
        client_id=row["client_id"],
        pet_id=row["pet_id"],
        description=row["description"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        version=row["version"],
        client_name=row["client_name"],
        pet_info=pet_info,
    )


def _foster_query() -> SelectQuery:
    return SelectQuery("fosters", FOSTER_COLUMNS, FOSTER_JOINS)


def _fetch_foster(conn: sqlite3.Connection, foster_id: int) -> Optional[FosterRead]:
    sql, params = _foster_query().where(eq("fosters.id", foster_id)).to_sql()
    row = conn.execute(sql, tuple(params)).fetchone()
    return row_to_foster(row) if row else None


def _existing_intervals(cursor: sqlite3.Cursor, pet_id: int) -> List[FosterCandidate]:
    rows = cursor.execute(
        "SELECT id, pet_id, start_date, end_date FROM fosters WHERE pet_id = ?",
        (pet_id,),
    ).fetchall()
    return [
        FosterCandidate(
            id=row["id"],
            pet_id=row["pet_id"],
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]) if row["end_date"] else None,
        )
        for row in rows
    ]


def _check_references(cursor: sqlite3.Cursor, client_id: int, pet_id: int) -> None:
    if not row_exists(cursor, "clients", client_id):
        raise NotFoundError(f"Client {client_id} not found")
    if not row_exists(cursor, "pets", pet_id):
        raise NotFoundError(f"Pet {pet_id} not found")


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class FosterService:
    """Service for foster assignments."""

    @classmethod
    async def list_fosters(
        cls,
        search_string: Optional[str] = None,
        start_date_gte: Optional[date] = None,
        start_date_lt: Optional[date] = None,
        end_date_gte: Optional[date] = None,
        end_date_lt: Optional[date] = None,
        client_id: Optional[int] = None,
        pet_id: Optional[int] = None,
        sort_order: Optional[FosterSortOrder] = None,
        page_number: int = 1,
        page_size: int = 6,
    ) -> PaginatedList[FosterRead]:
        """Return one page of fosters.

        Parameters
        ----------
        search_string : Optional[str]
            Substring of the description, the client's name or the pet's
            name.
        start_date_gte, start_date_lt, end_date_gte, end_date_lt : Optional[date]
            Half-open date bounds.  Open-ended fosters never match an end
            date bound.
        client_id, pet_id : Optional[int]
            Exact matches.
        """
        query = _foster_query()
        if search_string:
            query.where(
                or_(
                    icontains("fosters.description", search_string),
                    icontains("c.name", search_string),
                    icontains("p.name", search_string),
                )
            )
        if start_date_gte is not None:
            query.where(gte("fosters.start_date", start_date_gte.isoformat()))
        if start_date_lt is not None:
            query.where(lt("fosters.start_date", start_date_lt.isoformat()))
        if end_date_gte is not None:
            query.where(gte("fosters.end_date", end_date_gte.isoformat()))
        if end_date_lt is not None:
            query.where(lt("fosters.end_date", end_date_lt.isoformat()))
        if client_id is not None:
            query.where(eq("fosters.client_id", client_id))
        if pet_id is not None:
            query.where(eq("fosters.pet_id", pet_id))
        query.order_by(*FOSTER_SORTS[sort_order or FosterSortOrder.ID_ASC])

        conn = get_connection()
        try:
            return paginate(conn, query, page_number, page_size, row_to_foster)
        finally:
            conn.close()

    @classmethod
    async def get_all_fosters(cls) -> List[FosterRead]:
        sql, params = _foster_query().order_by(*FOSTER_SORTS[FosterSortOrder.ID_ASC]).to_sql()
        conn = get_connection()
        try:
            return [row_to_foster(row) for row in conn.execute(sql, tuple(params))]
        finally:
            conn.close()

    @classmethod
    async def get_foster(cls, foster_id: int, client_id: Optional[int] = None) -> FosterRead:
        """Return a foster by id.

        When ``client_id`` is given, a foster belonging to another client
        is reported as not found.
        """
        conn = get_connection()
        try:
            foster = _fetch_foster(conn, foster_id)
        finally:
            conn.close()
        if foster is None or (client_id is not None and foster.client_id != client_id):
            raise NotFoundError(f"Foster {foster_id} not found")
        return foster

    @classmethod
    async def get_foster_for_pet(cls, pet_id: int) -> List[FosterRead]:
        """Return the foster history of a pet, most recent first."""
        sql, params = (
            _foster_query()
            .where(eq("fosters.pet_id", pet_id))
            .order_by(*FOSTER_SORTS[FosterSortOrder.START_DATE_DESC])
            .to_sql()
        )
        conn = get_connection()
        try:
            return [row_to_foster(row) for row in conn.execute(sql, tuple(params))]
        finally:
            conn.close()

    @classmethod
    async def get_active_foster_for_pet(
        cls, pet_id: int, today: Optional[date] = None
    ) -> Optional[FosterRead]:
        """Return the foster covering ``today`` for a pet, if any.

        A foster is active when it started on or before today and either
        has no end date or ends today or later.
        """
        day = (today or date.today()).isoformat()
        sql, params = (
            _foster_query()
            .where(
                eq("fosters.pet_id", pet_id),
                lte("fosters.start_date", day),
                or_(is_null("fosters.end_date"), gte("fosters.end_date", day)),
            )
            .order_by(*FOSTER_SORTS[FosterSortOrder.START_DATE_DESC])
            .to_sql(limit=1)
        )
        conn = get_connection()
        try:
            row = conn.execute(sql, tuple(params)).fetchone()
            return row_to_foster(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def create_foster(cls, data: FosterAdminCreate) -> WriteResult[FosterRead]:
        """Validate and insert a foster.

        Raises ``NotFoundError`` when the client or pet does not exist.
        A date rule violation is returned as ``REJECTED`` and nothing is
        written.
        """
        conn = get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            cursor = conn.cursor()
            _check_references(cursor, data.client_id, data.pet_id)
            verdict = validate_foster_dates(
                FosterCandidate(data.pet_id, data.start_date, data.end_date),
                _existing_intervals(cursor, data.pet_id),
            )
            if not verdict.valid:
                conn.rollback()
                logger.info("Rejected foster for pet %s: %s", data.pet_id, verdict.message)
                return WriteResult.rejected(verdict.message)
            cursor.execute(
                "INSERT INTO fosters (client_id, pet_id, description, start_date, end_date) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    data.client_id,
                    data.pet_id,
                    data.description,
                    _iso(data.start_date),
                    _iso(data.end_date),
                ),
            )
            foster_id = cursor.lastrowid
            conn.commit()
            logger.info(
                "Created foster %s (pet %s, client %s)", foster_id, data.pet_id, data.client_id
            )
            return WriteResult.success(_fetch_foster(conn, foster_id))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def update_foster(cls, foster_id: int, data: FosterUpdate) -> WriteResult[FosterRead]:
        """Validate and apply an edit.

        The foster's own stored dates are excluded from the overlap check.
        """
        conn = get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            cursor = conn.cursor()
            if not row_exists(cursor, "fosters", foster_id):
                conn.rollback()
                return WriteResult.not_found()
            _check_references(cursor, data.client_id, data.pet_id)
            verdict = validate_foster_dates(
                FosterCandidate(data.pet_id, data.start_date, data.end_date, id=foster_id),
                _existing_intervals(cursor, data.pet_id),
                exclude_id=foster_id,
            )
            if not verdict.valid:
                conn.rollback()
                logger.info("Rejected edit of foster %s: %s", foster_id, verdict.message)
                return WriteResult.rejected(verdict.message)
            status = update_row(
                cursor,
                "fosters",
                foster_id,
                {
                    "client_id": data.client_id,
                    "pet_id": data.pet_id,
                    "description": data.description,
                    "start_date": _iso(data.start_date),
                    "end_date": _iso(data.end_date),
                },
                expected_version=data.version,
            )
            if status != WriteStatus.OK:
                conn.rollback()
                return WriteResult(status)
            conn.commit()
            logger.info("Updated foster %s", foster_id)
            return WriteResult.success(_fetch_foster(conn, foster_id))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def delete_foster(cls, foster_id: int) -> None:
        conn = get_connection()
        try:
            if not delete_row(conn.cursor(), "fosters", foster_id):
                raise NotFoundError(f"Foster {foster_id} not found")
            conn.commit()
            logger.info("Deleted foster %s", foster_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
