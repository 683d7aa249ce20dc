"""Table shape discovery."""

from __future__ import annotations

from recordkit.connection import Database, get_database
from recordkit.log import get_logger

logger = get_logger(__name__)


def columns_for(table_name: str, database: Database | None = None) -> list[str]:
    """Return the column names of ``table_name`` in table order.

    Issues a zero-row ``SELECT *`` and reads the cursor's column metadata.
    Callers cache the result; a later change to the table is not seen.
    """
    db = database if database is not None else get_database()
    result = db.execute(f"SELECT * FROM {table_name} LIMIT 0")
    logger.debug("Reflected %s", table_name, extra={"columns": result.columns})
    return list(result.columns)


__all__ = ["columns_for"]
