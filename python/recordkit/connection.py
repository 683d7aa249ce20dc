"""The single process-wide SQLite connection.

Every statement issued by models and relations funnels through one
:class:`Database`. The backing file is rebuilt from the schema script the
first time a connection is needed, so touching the database before any
explicit ``reset()`` wipes whatever was on disk.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any

from recordkit.log import get_logger

if TYPE_CHECKING:
    from recordkit.config import Settings

logger = get_logger(__name__)

MEMORY = ":memory:"


class QueryResult:
    """Result from executing a SQL statement."""

    __slots__ = ("_columns", "_rows", "_rowcount", "_lastrowid")

    def __init__(
        self,
        columns: list[str],
        rows: list[dict[str, Any]],
        rowcount: int,
        lastrowid: int | None = None,
    ) -> None:
        self._columns = columns
        self._rows = rows
        self._rowcount = rowcount
        self._lastrowid = lastrowid

    @property
    def columns(self) -> list[str]:
        """Column names, in select order. Populated even when no rows match."""
        return self._columns

    @property
    def rowcount(self) -> int:
        """Rows returned by a query, or rows affected by a write."""
        return len(self._rows) if self._columns else self._rowcount

    @property
    def lastrowid(self) -> int | None:
        """Connection rowid of the latest INSERT as of this statement, if any."""
        return self._lastrowid

    def all(self) -> list[dict[str, Any]]:
        return list(self._rows)

    def first(self) -> dict[str, Any] | None:
        return self._rows[0] if self._rows else None

    def is_empty(self) -> bool:
        return not self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self._rows)

    def __repr__(self) -> str:
        return f"<QueryResult columns={self._columns!r} rows={len(self._rows)}>"


class Database:
    """Owns at most one live SQLite connection.

    Example:
        >>> db = Database("cats.db", schema_file="cats.sql")
        >>> db.execute("SELECT * FROM cats WHERE name = ?", "Breakfast").first()
        {'id': 1, 'name': 'Breakfast', 'owner_id': 1}
    """

    def __init__(self, db_file: str | Path = MEMORY, schema_file: str | Path | None = None) -> None:
        self.db_file = str(db_file)
        self.schema_file = Path(schema_file) if schema_file is not None else None
        self._conn: sqlite3.Connection | None = None
        self._last_insert_id: int | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        return cls(settings.db_file, settings.schema_file)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        """The live connection, rebuilding the database first if there is none."""
        if self._conn is None:
            return self.reset()
        return self._conn

    def open(self) -> sqlite3.Connection:
        """Open a connection to the current file without touching its contents."""
        self.close()
        # isolation_level=None: every statement commits on its own.
        conn = sqlite3.connect(self.db_file, isolation_level=None)
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._last_insert_id = None
        return conn

    def reset(self) -> sqlite3.Connection:
        """Destroy the backing store and recreate it from the schema script."""
        logger.info(
            "Resetting database %s", self.db_file,
            extra={"schema_file": str(self.schema_file) if self.schema_file else None},
        )
        self.close()
        if self.db_file != MEMORY:
            Path(self.db_file).unlink(missing_ok=True)

        conn = self.open()
        if self.schema_file is not None:
            conn.executescript(self.schema_file.read_text(encoding="utf-8"))
        return conn

    def execute(self, sql: str, *params: Any) -> QueryResult:
        """Execute one statement with positional ``?`` binds.

        Driver errors propagate unchanged.
        """
        logger.info("%s", sql, extra={"params": params})

        cursor = self.connection.execute(sql, params)
        try:
            columns = [desc[0] for desc in cursor.description] if cursor.description else []
            rows = [dict(row) for row in cursor.fetchall()]
            if cursor.lastrowid is not None:
                self._last_insert_id = cursor.lastrowid
            return QueryResult(columns, rows, cursor.rowcount, cursor.lastrowid)
        finally:
            cursor.close()

    def last_insert_row_id(self) -> int:
        """Rowid assigned by the most recent INSERT run through :meth:`execute`.

        Read from the driver after each ``execute``, so no statement runs here.
        Zero until something has been inserted.
        """
        return self._last_insert_id or 0

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<Database {self.db_file!r} {state}>"


_database: Database | None = None


def get_database() -> Database:
    """Return the process-wide database, building it from settings on first use."""
    global _database
    if _database is None:
        from recordkit.config import get_settings

        _database = Database.from_settings(get_settings())
    return _database


def set_database(database: Database | None) -> Database | None:
    """Install ``database`` as the process-wide instance and return the previous one."""
    global _database
    previous, _database = _database, database
    return previous


__all__ = ["MEMORY", "Database", "QueryResult", "get_database", "set_database"]
