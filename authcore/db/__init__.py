"""Database module for authcore.

This module provides the Core API for sqlite operations and the identity
store implementations used by the auth service.

ARCHITECTURE:
- Core owns its connection (no Flask g.db dependency)
- Connection closes on context exit (atomic=True) or via close()
- Each table gets an encapsulated operations class (core.user)

IDENTITY STORES:
- IdentityStore: protocol consumed by AuthService
- SQLiteIdentityStore: one Core per operation against a database file
- InMemoryIdentityStore: dict-backed, for tests and embedded use
"""

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from ..schema import load_schema

if TYPE_CHECKING:
    from .user import UserOperations


class Core:
    """
    Database Core with table operations.

    Maintains its own connection and transaction state.
    Provides access to table operations through properties.

    Connection Lifecycle:
    - atomic=True: Connection commits or rolls back and closes on __exit__
    - atomic=False: Caller commits and calls close()
    """

    def __init__(self, connection: sqlite3.Connection, atomic: bool = False):
        """Initialize Core with a database connection.

        Args:
            connection: SQLite connection with row_factory set to sqlite3.Row
            atomic: If True, Core MUST be used as context manager.
        """
        self._conn = connection
        self._atomic = atomic
        self._user_ops = None

    @property
    def user(self) -> "UserOperations":
        """User operations.

        Lazy-loaded to avoid circular import issues.
        """
        if self._user_ops is None:
            from .user import UserOperations
            self._user_ops = UserOperations(self._conn)
        return self._user_ops

    def commit(self) -> None:
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "Core":
        """Enter context manager for atomic transaction.

        Raises:
            RuntimeError: If Core was not created with atomic=True
        """
        if not self._atomic:
            raise RuntimeError(
                "Core must be created with atomic=True for context manager use. "
                "Use: with db.get_core(path, atomic=True) as core:"
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager, committing or rolling back transaction."""
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        finally:
            self._conn.close()


def _create_connection(database_path: str) -> sqlite3.Connection:
    """Create a fresh database connection.

    Returns:
        SQLite connection with row_factory set to sqlite3.Row
        and foreign keys enabled.
    """
    if database_path != ":memory:":
        Path(database_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(database_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_core(database_path: str, atomic: bool = False) -> Core:
    """
    Get a database Core instance.

    Args:
        database_path: Path to the sqlite database file
        atomic: If True, returns a Core that MUST be used as context manager.

    Examples:
        >>> with get_core("./data/authcore.db", atomic=True) as core:
        ...     user = core.user.get_by_email("a@x.com")
    """
    return Core(_create_connection(database_path), atomic=atomic)


# ============================================================================
# DATABASE INITIALIZATION
# ============================================================================

def init_db(database_path: str) -> None:
    """Initialize database by running schema.sql if not already initialized."""
    conn = _create_connection(database_path)
    try:
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='_schema_metadata'"
        )
        if cursor.fetchone():
            # Database already initialized, skip
            return

        conn.executescript(load_schema())
        conn.commit()
    finally:
        conn.close()


from .store import IdentityStore, InMemoryIdentityStore, SQLiteIdentityStore  # noqa: E402

__all__ = [
    "Core",
    "get_core",
    "init_db",
    "IdentityStore",
    "InMemoryIdentityStore",
    "SQLiteIdentityStore",
]
