"""RecordKit - a small record-mapping layer over a single SQLite connection."""

from __future__ import annotations

from recordkit.associations import (
    AssocOptions,
    BelongsToOptions,
    HasManyOptions,
    HasManyThrough,
    HasOneThrough,
    belongs_to,
    has_many,
    has_many_through,
    has_one_through,
)
from recordkit.base import Base
from recordkit.config import Settings, get_settings
from recordkit.connection import Database, QueryResult, get_database, set_database
from recordkit.exceptions import (
    AssociationError,
    RecordKitError,
    UnknownAttributeError,
    UnsupportedOperationError,
)
from recordkit.log import configure_logging
from recordkit.relation import Relation

__version__ = "0.1.0"

__all__ = [
    # Connection
    "connect",
    "Database",
    "QueryResult",
    "get_database",
    "set_database",
    "Settings",
    "get_settings",
    "configure_logging",
    # Model definition
    "Base",
    "belongs_to",
    "has_many",
    "has_one_through",
    "has_many_through",
    "AssocOptions",
    "BelongsToOptions",
    "HasManyOptions",
    "HasOneThrough",
    "HasManyThrough",
    # Querying
    "Relation",
    # Errors
    "RecordKitError",
    "UnknownAttributeError",
    "UnsupportedOperationError",
    "AssociationError",
]


def connect(db_file: str = ":memory:", schema_file: str | None = None) -> Database:
    """Install a new process-wide database and rebuild it from ``schema_file``.

    Args:
        db_file: SQLite file path, or ``":memory:"``.
        schema_file: DDL script run against the fresh database.

    Returns:
        The Database every model now uses.

    Example:
        >>> connect("cats.db", schema_file="cats.sql")
        >>> Cat.finalize()
    """
    database = Database(db_file, schema_file)
    previous = set_database(database)
    if previous is not None:
        previous.close()
    database.reset()
    return database
