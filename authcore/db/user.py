"""User table operations.

IMPORT CONVENTION:
- Core accesses these through the core.user property
- NO direct import needed when using Core API

ID GENERATION POLICY:
A user without an id gets an auto-generated UUID on create. A UUID
collision is retried with a fresh UUID; a caller-supplied id is never
replaced.
"""

import logging
import sqlite3

from ..auth.schemas import User
from ..exceptions import DuplicateEmailError, ResourceNotFound, StorageError
from ..utils import isodatetime, uid

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, email, password_hash, full_name, created_at, updated_at"


def _row_to_user(row: sqlite3.Row) -> User:
    """Convert a users row to a User record."""
    return User(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        full_name=row["full_name"],
        created_at=isodatetime.to_datetime(row["created_at"]),
        updated_at=isodatetime.to_datetime(row["updated_at"]),
    )


class UserOperations:
    """User operations over a single sqlite connection."""

    def __init__(self, conn: sqlite3.Connection):
        """Initialize user operations with a database connection.

        Args:
            conn: SQLite connection with row_factory set to sqlite3.Row
        """
        self._conn = conn

    def create(self, user: User) -> User:
        """Insert a user, assigning id and timestamps.

        Args:
            user: User record; id may be empty

        Returns:
            The stored User with id, created_at and updated_at set

        Raises:
            DuplicateEmailError: If the email is already registered
            StorageError: On any other database failure
        """
        generate_id = not user.id
        max_retries = 3 if generate_id else 1

        for attempt in range(max_retries):
            user_id = uid.generate_uuid() if generate_id else user.id
            now = isodatetime.now()
            try:
                self._conn.execute(
                    f"""INSERT INTO users ({_USER_COLUMNS})
                        VALUES (?, ?, ?, ?, ?, ?)""",
                    (user_id, user.email, user.password_hash, user.full_name, now, now)
                )
            except sqlite3.IntegrityError as e:
                if "users.email" in str(e):
                    raise DuplicateEmailError(
                        "email already registered",
                        {"email": user.email}
                    ) from e
                if "users.id" in str(e) and attempt < max_retries - 1:
                    # UUID collision - retry with new UUID
                    continue
                raise StorageError(f"Failed to create user: {e}") from e
            except sqlite3.Error as e:
                raise StorageError(f"Failed to create user: {e}") from e

            logger.debug(f"Created user {user_id}")
            return user.model_copy(update={
                "id": user_id,
                "created_at": isodatetime.to_datetime(now),
                "updated_at": isodatetime.to_datetime(now),
            })

        raise StorageError("Failed to generate unique user id after retries")

    def get_by_id(self, user_id: str) -> User:
        """Get user by ID, raise ResourceNotFound if not found."""
        row = self._fetch_one("id", user_id)
        if row is None:
            raise ResourceNotFound(
                f"User '{user_id}' not found",
                {"user_id": user_id}
            )
        return _row_to_user(row)

    def get_by_email(self, email: str) -> User:
        """Get user by email, raise ResourceNotFound if not found."""
        row = self._fetch_one("email", email)
        if row is None:
            raise ResourceNotFound("User not found", {"email": email})
        return _row_to_user(row)

    def _fetch_one(self, column: str, value: str) -> sqlite3.Row | None:
        try:
            return self._conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE {column} = ?",
                (value,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to look up user: {e}") from e
