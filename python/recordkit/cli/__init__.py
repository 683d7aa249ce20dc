"""RecordKit CLI - command-line access to the configured database."""

from __future__ import annotations

import argparse
import sqlite3
import sys
from typing import Any

from recordkit.config import Settings, get_settings
from recordkit.connection import Database
from recordkit.log import configure_logging, get_logger
from recordkit.reflection import columns_for

logger = get_logger(__name__)


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success)
    """
    parser = argparse.ArgumentParser(
        prog="recordkit",
        description="RecordKit - a small record-mapping layer over SQLite",
    )
    parser.add_argument("--db-file", help="SQLite file (overrides RECORDKIT_DB_FILE)")
    parser.add_argument("--schema-file", help="DDL script (overrides RECORDKIT_SCHEMA_FILE)")
    parser.add_argument("--log-level", help="Logging level (overrides RECORDKIT_LOG_LEVEL)")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit logs as JSON lines",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("reset", help="Rebuild the database from the schema script")

    columns_parser = subparsers.add_parser("columns", help="Show the columns of a table")
    columns_parser.add_argument("table", help="Table name")

    sql_parser = subparsers.add_parser("sql", help="Run one SQL statement")
    sql_parser.add_argument("statement", help="SQL text, with ? placeholders")
    sql_parser.add_argument("params", nargs="*", help="Values bound to the placeholders")

    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 1

    settings = _settings_from_args(parsed)
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    database = Database.from_settings(settings)

    try:
        if parsed.command == "reset":
            return _reset(database)
        elif parsed.command == "columns":
            return _columns(database, parsed.table)
        elif parsed.command == "sql":
            return _sql(database, parsed.statement, parsed.params)
    except sqlite3.Error as e:
        logger.error("Database error: %s", e)
        return 1
    finally:
        database.close()

    return 0


def _settings_from_args(parsed: Any) -> Settings:
    overrides = {
        "db_file": parsed.db_file,
        "schema_file": parsed.schema_file,
        "log_level": parsed.log_level,
        "json_logs": parsed.json_logs,
    }
    return get_settings().model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )


def _reset(database: Database) -> int:
    database.reset()
    print(f"Reset {database.db_file}")
    return 0


def _columns(database: Database, table: str) -> int:
    # An explicit command must not wipe the file, so open it as it is
    database.open()
    for column in columns_for(table, database):
        print(column)
    return 0


def _sql(database: Database, statement: str, params: list[str]) -> int:
    database.open()
    result = database.execute(statement, *params)
    if result.columns:
        print("\t".join(result.columns))
        for row in result:
            print("\t".join("" if value is None else str(value) for value in row.values()))
    else:
        print(f"{result.rowcount} row(s) affected")
    return 0


if __name__ == "__main__":
    sys.exit(main())
