"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and the two record-store primitives the services build
on: ``update_row`` (optimistic concurrency on the ``version`` column)
and ``delete_row`` (runs the registered delete hooks inside the same
transaction as the delete).

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from .config import settings

logger = logging.getLogger(__name__)


class WriteStatus(str, Enum):
    """Outcome of a write against the store."""

    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    REJECTED = "rejected"


DeleteHook = Callable[[sqlite3.Cursor, Any], None]

_DELETE_HOOKS: Dict[str, List[DeleteHook]] = {}


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # pet_rescue_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` objects so columns can be
    accessed by name.  No type detection is enabled: dates are stored
    and returned as ISO strings and parsed by the pydantic schemas.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    # Foreign key enforcement is off by default in SQLite and must be
    # enabled per connection.
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def on_delete(table: str) -> Callable[[DeleteHook], DeleteHook]:
    """Register ``hook(cursor, key)`` to run before a row of ``table`` is deleted."""

    def decorator(hook: DeleteHook) -> DeleteHook:
        _DELETE_HOOKS.setdefault(table, []).append(hook)
        return hook

    return decorator


def row_exists(cursor: sqlite3.Cursor, table: str, key: Any) -> bool:
    row = cursor.execute(f"SELECT 1 FROM {table} WHERE id = ?", (key,)).fetchone()
    return row is not None


def update_row(
    cursor: sqlite3.Cursor,
    table: str,
    key: Any,
    values: Dict[str, Any],
    expected_version: Optional[int] = None,
) -> WriteStatus:
    """Update a row and bump its ``version``.

    When ``expected_version`` is given the update only applies if the
    stored version still matches.  If no row was touched, existence is
    checked once: a missing row yields ``NOT_FOUND``, a row that changed
    in the meantime yields ``CONFLICT``.  The caller owns the
    transaction and must commit on ``OK``.
    """
    assignments = [f"{column} = ?" for column in values]
    assignments.append("version = version + 1")
    assignments.append("updated_at = CURRENT_TIMESTAMP")
    params: List[Any] = list(values.values())
    sql = f"UPDATE {table} SET {', '.join(assignments)} WHERE id = ?"
    params.append(key)
    if expected_version is not None:
        sql += " AND version = ?"
        params.append(expected_version)
    cursor.execute(sql, tuple(params))
    if cursor.rowcount == 1:
        return WriteStatus.OK
    if not row_exists(cursor, table, key):
        return WriteStatus.NOT_FOUND
    logger.warning("Concurrent update detected on %s %s", table, key)
    return WriteStatus.CONFLICT


def delete_row(cursor: sqlite3.Cursor, table: str, key: Any) -> bool:
    """Delete a row after running its delete hooks.

    Returns ``False`` when the row does not exist (nothing is touched).
    The caller owns the transaction.
    """
    if not row_exists(cursor, table, key):
        return False
    for hook in _DELETE_HOOKS.get(table, []):
        hook(cursor, key)
    cursor.execute(f"DELETE FROM {table} WHERE id = ?", (key,))
    return True


# Deleting a pet or client keeps its foster history; the reference is
# cleared instead.
@on_delete("pets")
def _detach_fosters_from_pet(cursor: sqlite3.Cursor, pet_id: Any) -> None:
    cursor.execute(
        "UPDATE fosters SET pet_id = NULL, version = version + 1 WHERE pet_id = ?",
        (pet_id,),
    )


@on_delete("clients")
def _detach_fosters_from_client(cursor: sqlite3.Cursor, client_id: Any) -> None:
    cursor.execute(
        "UPDATE fosters SET client_id = NULL, version = version + 1 WHERE client_id = ?",
        (client_id,),
    )


@on_delete("users")
def _detach_clients_from_user(cursor: sqlite3.Cursor, user_id: Any) -> None:
    cursor.execute(
        "UPDATE clients SET user_id = NULL, version = version + 1 WHERE user_id = ?",
        (user_id,),
    )


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations.  If you add
    a new migration, append it with an incremented version number.
    """
    migrations: list[tuple[int, str]] = [
        # Migration 1: Initial schema
        (
            1,
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                name TEXT,
                phone TEXT,
                role TEXT NOT NULL DEFAULT 'USER',
                password TEXT,
                failed_logins INTEGER NOT NULL DEFAULT 0,
                lockout_until TIMESTAMP,
                version INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS clients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT,
                name TEXT NOT NULL,
                address TEXT,
                phone TEXT,
                description TEXT,
                version INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY(user_id) REFERENCES users(id)
            );

            CREATE TABLE IF NOT EXISTS pets (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                species TEXT NOT NULL,
                gender TEXT NOT NULL,
                age INTEGER,
                description TEXT,
                version INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS fosters (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                client_id INTEGER,
                pet_id INTEGER,
                description TEXT,
                start_date TEXT NOT NULL,
                end_date TEXT,
                version INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY(client_id) REFERENCES clients(id),
                FOREIGN KEY(pet_id) REFERENCES pets(id)
            );
            """,
        ),
        # Migration 2: indices on foreign keys used by filters and hooks
        (
            2,
            """
            CREATE INDEX IF NOT EXISTS idx_fosters_pet_id ON fosters(pet_id);
            CREATE INDEX IF NOT EXISTS idx_fosters_client_id ON fosters(client_id);
            CREATE INDEX IF NOT EXISTS idx_clients_user_id ON clients(user_id);
            """,
        ),
    ]

    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in migrations:
            if version > current_version:
                logger.info("Applying migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
