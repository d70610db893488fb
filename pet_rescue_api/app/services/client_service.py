"""
Business logic for clients.

A client is the person fostering pets.  It may be linked to a user
account, in which case the listing shows the user's profile and can be
searched and sorted by the user's email.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.db import WriteStatus, delete_row, get_connection, row_exists, update_row
from ..core.exceptions import NotFoundError
from ..core.paging import PaginatedList, paginate
from ..core.query import (
    SelectQuery,
    build_sort_table,
    eq,
    icontains,
    is_not_null,
    is_null,
    or_,
)
from ..schemas.client import ClientCreate, ClientRead, ClientSortOrder, ClientUpdate
from ..schemas.user import UserInfo
from .results import WriteResult

logger = logging.getLogger(__name__)

CLIENT_COLUMNS = (
    "clients.id",
    "clients.user_id",
    "clients.name",
    "clients.address",
    "clients.phone",
    "clients.description",
    "clients.version",
    "u.email AS user_email",
    "u.name AS user_display_name",
    "u.phone AS user_phone",
)

CLIENT_JOINS = ("LEFT JOIN users u ON u.id = clients.user_id",)

CLIENT_SORTS = build_sort_table(
    ClientSortOrder,
    {
        "id": "clients.id",
        "name": "clients.name",
        "addr": "clients.address",
        "user": "u.email",
    },
    key_column="clients.id",
)


def row_to_client(row: sqlite3.Row) -> ClientRead:
    user_info = None
    if row["user_email"] is not None:
        user_info = UserInfo(
            name=row["user_display_name"],
            user_name=row["user_email"],
            email=row["user_email"],
            phone=row["user_phone"],
        )
    return ClientRead(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        address=row["address"],
        phone=row["phone"],
        description=row["description"],
        version=row["version"],
        user_info=user_info,
    )


def _client_query() -> SelectQuery:
    return SelectQuery("clients", CLIENT_COLUMNS, CLIENT_JOINS)


def _fetch_client(conn: sqlite3.Connection, client_id: int) -> Optional[ClientRead]:
    sql, params = _client_query().where(eq("clients.id", client_id)).to_sql()
    row = conn.execute(sql, tuple(params)).fetchone()
    return row_to_client(row) if row else None


def _unknown_user(conn: sqlite3.Connection, user_id: Optional[str]) -> bool:
    return user_id is not None and not row_exists(conn.cursor(), "users", user_id)


class ClientService:
    """Service for clients."""

    @classmethod
    async def list_clients(
        cls,
        search_string: Optional[str] = None,
        has_user: Optional[bool] = None,
        sort_order: Optional[ClientSortOrder] = None,
        page_number: int = 1,
        page_size: int = 6,
    ) -> PaginatedList[ClientRead]:
        """Return one page of clients.

        ``search_string`` matches name, address, phone, description and
        the linked user's email as substrings, or the linked user id
        exactly.  ``has_user`` keeps only clients with (or without) a
        linked user.
        """
        query = _client_query()
        if search_string:
            query.where(
                or_(
                    icontains("clients.name", search_string),
                    icontains("clients.address", search_string),
                    icontains("clients.phone", search_string),
                    icontains("clients.description", search_string),
                    icontains("u.email", search_string),
                    eq("clients.user_id", search_string),
                )
            )
        if has_user is True:
            query.where(is_not_null("clients.user_id"))
        elif has_user is False:
            query.where(is_null("clients.user_id"))
        query.order_by(*CLIENT_SORTS[sort_order or ClientSortOrder.ID_ASC])

        conn = get_connection()
        try:
            return paginate(conn, query, page_number, page_size, row_to_client)
        finally:
            conn.close()

    @classmethod
    async def get_all_clients(cls) -> List[ClientRead]:
        sql, params = (
            _client_query().order_by(*CLIENT_SORTS[ClientSortOrder.NAME_ASC]).to_sql()
        )
        conn = get_connection()
        try:
            return [row_to_client(row) for row in conn.execute(sql, tuple(params))]
        finally:
            conn.close()

    @classmethod
    async def get_client(cls, client_id: int) -> ClientRead:
        conn = get_connection()
        try:
            client = _fetch_client(conn, client_id)
        finally:
            conn.close()
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")
        return client

    @classmethod
    async def get_client_for_user_id(cls, user_id: str) -> Optional[ClientRead]:
        """Return the client linked to ``user_id``, or ``None``.

        If several clients are linked to the same user the oldest one
        is returned.
        """
        sql, params = (
            _client_query()
            .where(eq("clients.user_id", user_id))
            .order_by(*CLIENT_SORTS[ClientSortOrder.ID_ASC])
            .to_sql(limit=1)
        )
        conn = get_connection()
        try:
            row = conn.execute(sql, tuple(params)).fetchone()
            return row_to_client(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def create_client(cls, data: ClientCreate) -> WriteResult[ClientRead]:
        """Create a client.  An unknown ``user_id`` is rejected."""
        conn = get_connection()
        try:
            if _unknown_user(conn, data.user_id):
                return WriteResult.rejected("Linked user does not exist.")
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO clients (user_id, name, address, phone, description) "
                "VALUES (?, ?, ?, ?, ?)",
                (data.user_id, data.name, data.address, data.phone, data.description),
            )
            client_id = cursor.lastrowid
            conn.commit()
            logger.info("Created client %s (%s)", client_id, data.name)
            return WriteResult.success(_fetch_client(conn, client_id))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def update_client(
        cls, client_id: int, data: ClientUpdate
    ) -> WriteResult[ClientRead]:
        conn = get_connection()
        try:
            if _unknown_user(conn, data.user_id):
                return WriteResult.rejected("Linked user does not exist.")
            status = update_row(
                conn.cursor(),
                "clients",
                client_id,
                {
                    "user_id": data.user_id,
                    "name": data.name,
                    "address": data.address,
                    "phone": data.phone,
                    "description": data.description,
                },
                expected_version=data.version,
            )
            if status != WriteStatus.OK:
                conn.rollback()
                return WriteResult(status)
            conn.commit()
            logger.info("Updated client %s", client_id)
            return WriteResult.success(_fetch_client(conn, client_id))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def delete_client(cls, client_id: int) -> None:
        """Delete a client; its fosters are kept with ``client_id`` cleared."""
        conn = get_connection()
        try:
            if not delete_row(conn.cursor(), "clients", client_id):
                raise NotFoundError(f"Client {client_id} not found")
            conn.commit()
            logger.info("Deleted client %s", client_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
