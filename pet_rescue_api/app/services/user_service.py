"""
Business logic for users.

Besides the CRUD operations used by the admin screens, ``UserService``
owns the credential workflows: password sign-in with lockout after
repeated failures, self sign-up (which also creates the linked client)
and the password reset flow.  Password hashes and lockout counters are
read and written here only and never leave this module.
"""

import logging
import sqlite3
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..core.config import settings
from ..core.db import WriteStatus, delete_row, get_connection, update_row
from ..core.exceptions import AccountLockedError, DuplicateError, NotFoundError
from ..core.paging import PaginatedList, paginate
from ..core.query import SelectQuery, build_sort_table, eq, icontains, or_
from ..core.security import (
    SCOPE_RESET,
    create_reset_token,
    decode_access_token,
    hash_password,
    password_stamp,
    verify_password,
)
from ..schemas.user import (
    UserCreate,
    UserRead,
    UserRole,
    UserSelfUpdate,
    UserSortOrder,
    UserUpdate,
)
from .results import WriteResult

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "users.id",
    "users.email",
    "users.name",
    "users.phone",
    "users.role",
    "users.version",
)

USER_SORTS = build_sort_table(
    UserSortOrder,
    {
        "id": "users.id",
        "email": "users.email",
        "name": "users.name",
        "role": "users.role",
    },
    key_column="users.id",
)


def row_to_user(row: sqlite3.Row) -> UserRead:
    return UserRead(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        phone=row["phone"],
        role=row["role"],
        version=row["version"],
    )


def _fetch_user(conn: sqlite3.Connection, user_id: str) -> Optional[UserRead]:
    sql, params = SelectQuery("users", USER_COLUMNS).where(eq("users.id", user_id)).to_sql()
    row = conn.execute(sql, tuple(params)).fetchone()
    return row_to_user(row) if row else None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _insert_user(
    cursor: sqlite3.Cursor,
    email: str,
    name: Optional[str],
    phone: Optional[str],
    role: UserRole,
    password: Optional[str],
) -> str:
    user_id = str(uuid.uuid4())
    try:
        cursor.execute(
            "INSERT INTO users (id, email, name, phone, role, password) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                user_id,
                email,
                name,
                phone,
                role.value,
                hash_password(password) if password else None,
            ),
        )
    except sqlite3.IntegrityError as exc:
        raise DuplicateError(f"Email {email} is already registered") from exc
    return user_id


class UserService:
    """Service for users and their credentials."""

    @classmethod
    async def list_users(
        cls,
        search_string: Optional[str] = None,
        role: Optional[UserRole] = None,
        sort_order: Optional[UserSortOrder] = None,
        page_number: int = 1,
        page_size: int = 6,
    ) -> PaginatedList[UserRead]:
        """Return one page of users, searched by email or name."""
        query = SelectQuery("users", USER_COLUMNS)
        if search_string:
            query.where(
                or_(
                    icontains("users.email", search_string),
                    icontains("users.name", search_string),
                )
            )
        if role is not None:
            query.where(eq("users.role", UserRole(role).value))
        query.order_by(*USER_SORTS[sort_order or UserSortOrder.ID_ASC])

        conn = get_connection()
        try:
            return paginate(conn, query, page_number, page_size, row_to_user)
        finally:
            conn.close()

    @classmethod
    async def get_all_users(cls) -> List[UserRead]:
        sql, params = (
            SelectQuery("users", USER_COLUMNS)
            .order_by(*USER_SORTS[UserSortOrder.EMAIL_ASC])
            .to_sql()
        )
        conn = get_connection()
        try:
            return [row_to_user(row) for row in conn.execute(sql, tuple(params))]
        finally:
            conn.close()

    @classmethod
    async def get_user(cls, user_id: str) -> UserRead:
        conn = get_connection()
        try:
            user = _fetch_user(conn, user_id)
        finally:
            conn.close()
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    @classmethod
    async def get_user_by_email(cls, email: str) -> Optional[UserRead]:
        """Look up a user by email, ignoring case."""
        sql, params = SelectQuery("users", USER_COLUMNS).where(eq("users.email", email)).to_sql()
        conn = get_connection()
        try:
            row = conn.execute(sql, tuple(params)).fetchone()
            return row_to_user(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def create_user(cls, data: UserCreate) -> UserRead:
        """Create a user.

        Raises ``DuplicateError`` when the email is already registered.
        """
        conn = get_connection()
        try:
            user_id = _insert_user(
                conn.cursor(), data.email, data.name, data.phone, data.role, data.password
            )
            conn.commit()
            logger.info("Created user %s with role %s", data.email, data.role.value)
            return _fetch_user(conn, user_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def signup(cls, email: str, password: str) -> UserRead:
        """Register a ``USER`` account together with its client record.

        The client is named after the user's email.  Both rows are
        written in one transaction.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            user_id = _insert_user(cursor, email, None, None, UserRole.USER, password)
            cursor.execute(
                "INSERT INTO clients (user_id, name) VALUES (?, ?)", (user_id, email)
            )
            conn.commit()
            logger.info("Signed up user %s", email)
            return _fetch_user(conn, user_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def update_user(cls, user_id: str, data: UserUpdate) -> WriteResult[UserRead]:
        """Edit email, name, phone and role of a user.

        Raises ``DuplicateError`` when the new email belongs to another
        user.
        """
        return await cls._update(
            user_id,
            {
                "email": data.email,
                "name": data.name,
                "phone": data.phone,
                "role": data.role.value,
            },
            data.version,
        )

    @classmethod
    async def update_profile(
        cls, user_id: str, data: UserSelfUpdate
    ) -> WriteResult[UserRead]:
        """Apply the fields present in ``data`` to the user's own profile."""
        values = data.model_dump(exclude_unset=True)
        if values.get("email") is None:
            values.pop("email", None)
        return await cls._update(user_id, values, None)

    @classmethod
    async def _update(
        cls, user_id: str, values: dict, expected_version: Optional[int]
    ) -> WriteResult[UserRead]:
        conn = get_connection()
        try:
            try:
                status = update_row(
                    conn.cursor(), "users", user_id, values, expected_version=expected_version
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateError(f"Email {values.get('email')} is already registered") from exc
            if status != WriteStatus.OK:
                conn.rollback()
                return WriteResult(status)
            conn.commit()
            logger.info("Updated user %s", user_id)
            return WriteResult.success(_fetch_user(conn, user_id))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def delete_user(cls, user_id: str) -> None:
        """Delete a user; linked clients are kept with ``user_id`` cleared."""
        conn = get_connection()
        try:
            if not delete_row(conn.cursor(), "users", user_id):
                raise NotFoundError(f"User {user_id} not found")
            conn.commit()
            logger.info("Deleted user %s", user_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[UserRead]:
        """Check a password sign-in.

        Returns the user on success and ``None`` for an unknown email or
        a wrong password.  After ``settings.max_failed_logins``
        consecutive failures the account is locked for
        ``settings.lockout_minutes``; while locked, ``AccountLockedError``
        is raised without checking the password.  A successful sign-in
        resets the failure counter.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                "SELECT id, password, failed_logins, lockout_until FROM users WHERE email = ?",
                (email,),
            ).fetchone()
            if row is None:
                return None
            now = _now()
            if row["lockout_until"]:
                locked_until = datetime.fromisoformat(row["lockout_until"])
                if locked_until > now:
                    raise AccountLockedError(email, locked_until)

            if not verify_password(password, row["password"]):
                failed = row["failed_logins"] + 1
                lockout_until = None
                if failed >= settings.max_failed_logins:
                    lockout_until = (now + timedelta(minutes=settings.lockout_minutes)).isoformat()
                    failed = 0
                    logger.warning(
                        "Locking out %s for %s minutes after repeated failed sign-ins",
                        email,
                        settings.lockout_minutes,
                    )
                cursor.execute(
                    "UPDATE users SET failed_logins = ?, lockout_until = ? WHERE id = ?",
                    (failed, lockout_until, row["id"]),
                )
                conn.commit()
                return None

            cursor.execute(
                "UPDATE users SET failed_logins = 0, lockout_until = NULL WHERE id = ?",
                (row["id"],),
            )
            conn.commit()
            logger.info("User %s signed in", email)
            return _fetch_user(conn, row["id"])
        finally:
            conn.close()

    @classmethod
    async def forgot_password(cls, email: str) -> Optional[str]:
        """Issue a password reset code for ``email``.

        No mail is sent: the reset link is written to the log.  Returns
        the code, or ``None`` when no user has this email.
        """
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT id, password FROM users WHERE email = ?", (email,)
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        code = create_reset_token(row["id"], row["password"])
        logger.info("Password reset link for %s: /reset_password?resetCode=%s", email, code)
        return code

    @classmethod
    async def reset_password(cls, email: str, reset_code: str, new_password: str) -> bool:
        """Set a new password using a reset code.

        The code must be a valid reset token for this user, issued
        while the current password was in place.  Returns ``False`` when
        the code is rejected.  An unknown email is reported as success.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                "SELECT id, password FROM users WHERE email = ?", (email,)
            ).fetchone()
            if row is None:
                return True
            payload = decode_access_token(reset_code, scope=SCOPE_RESET)
            if (
                not payload
                or payload.get("sub") != row["id"]
                or payload.get("stamp") != password_stamp(row["password"])
            ):
                logger.warning("Invalid password reset code for %s", email)
                return False
            cls._store_password(cursor, row["id"], new_password)
            conn.commit()
            logger.info("Password reset for %s", email)
            return True
        finally:
            conn.close()

    @classmethod
    async def set_password(cls, email: str, new_password: str) -> bool:
        """Set a user's password directly.  Returns ``False`` for an unknown email."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id FROM users WHERE email = ?", (email,)).fetchone()
            if row is None:
                return False
            cls._store_password(cursor, row["id"], new_password)
            conn.commit()
            logger.info("Password set for %s", email)
            return True
        finally:
            conn.close()

    @staticmethod
    def _store_password(cursor: sqlite3.Cursor, user_id: str, new_password: str) -> None:
        # A new password also lifts any lockout.
        cursor.execute(
            "UPDATE users SET password = ?, failed_logins = 0, lockout_until = NULL, "
            "version = version + 1, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (hash_password(new_password), user_id),
        )
