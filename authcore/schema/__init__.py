"""Schema module for authcore.

schema.sql is the source of truth for the sqlite data model.
"""

from pathlib import Path

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def load_schema() -> str:
    """Return the schema SQL script."""
    return SCHEMA_PATH.read_text(encoding="utf-8")


__all__ = ["SCHEMA_PATH", "load_schema"]
