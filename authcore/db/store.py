"""Identity store implementations.

The auth service depends only on the IdentityStore protocol. Lookups raise
ResourceNotFound on a miss and StorageError on any other failure; create
raises DuplicateEmailError when the email is taken. Each implementation
enforces email uniqueness atomically.
"""

import logging
import sqlite3
import threading
from typing import Protocol

from ..auth.schemas import User
from ..exceptions import DuplicateEmailError, ResourceNotFound, StorageError
from ..utils import isodatetime, uid

logger = logging.getLogger(__name__)


class IdentityStore(Protocol):
    """Persistence collaborator holding User records."""

    def create(self, user: User) -> User:
        """Persist a new user and return it with id and timestamps set."""
        ...

    def find_by_email(self, email: str) -> User:
        """Return the user with this email or raise ResourceNotFound."""
        ...

    def find_by_id(self, user_id: str) -> User:
        """Return the user with this id or raise ResourceNotFound."""
        ...


class SQLiteIdentityStore:
    """
    Identity store backed by a sqlite database file.

    Opens one connection per operation and closes it on exit, so instances
    can be shared freely across request threads. The UNIQUE constraint on
    users.email is the authoritative duplicate guard.
    """

    def __init__(self, database_path: str):
        self._database_path = database_path

    @property
    def database_path(self) -> str:
        return self._database_path

    def create(self, user: User) -> User:
        with self._core() as core:
            return core.user.create(user)

    def find_by_email(self, email: str) -> User:
        with self._core() as core:
            return core.user.get_by_email(email)

    def find_by_id(self, user_id: str) -> User:
        with self._core() as core:
            return core.user.get_by_id(user_id)

    def _core(self):
        from . import get_core

        try:
            return get_core(self._database_path, atomic=True)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Cannot open database {self._database_path}: {e}")
            raise StorageError("Database unavailable") from e


class InMemoryIdentityStore:
    """Dict-backed identity store guarded by a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[str, User] = {}
        self._id_by_email: dict[str, str] = {}

    def create(self, user: User) -> User:
        with self._lock:
            if user.email in self._id_by_email:
                raise DuplicateEmailError(
                    "email already registered",
                    {"email": user.email}
                )

            user_id = user.id or uid.generate_uuid()
            if user_id in self._by_id:
                raise StorageError(
                    f"User '{user_id}' already exists",
                    {"user_id": user_id}
                )

            now = isodatetime.to_datetime(isodatetime.now())
            stored = user.model_copy(update={
                "id": user_id,
                "created_at": now,
                "updated_at": now,
            })
            self._by_id[user_id] = stored
            self._id_by_email[stored.email] = user_id

        return stored.model_copy()

    def find_by_email(self, email: str) -> User:
        with self._lock:
            user_id = self._id_by_email.get(email)
            user = self._by_id.get(user_id) if user_id else None
        if user is None:
            raise ResourceNotFound("User not found", {"email": email})
        return user.model_copy()

    def find_by_id(self, user_id: str) -> User:
        with self._lock:
            user = self._by_id.get(user_id)
        if user is None:
            raise ResourceNotFound(
                f"User '{user_id}' not found",
                {"user_id": user_id}
            )
        return user.model_copy()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)
