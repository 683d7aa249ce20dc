"""Pytest configuration and fixtures."""

import logging
from pathlib import Path

import pytest

from recordkit import Database, set_database

from models import Cat, House, Human

SCHEMA_FILE = Path(__file__).parent / "fixtures" / "cats.sql"


@pytest.fixture
def schema_file():
    return SCHEMA_FILE


@pytest.fixture(autouse=True)
def database(tmp_path):
    """Fresh cats/humans/houses database installed as the process-wide one."""
    db = Database(tmp_path / "cats.db", SCHEMA_FILE)
    previous = set_database(db)
    db.reset()

    for model in (Cat, Human, House):
        model.finalize()

    yield db

    db.close()
    set_database(previous)


class StatementLog:
    """SQL statements seen on the connection logger since the last clear()."""

    def __init__(self, caplog):
        self._caplog = caplog

    @property
    def statements(self):
        return [
            record.getMessage()
            for record in self._caplog.records
            if record.name == "recordkit.connection" and hasattr(record, "params")
        ]

    def clear(self):
        self._caplog.clear()

    def __len__(self):
        return len(self.statements)


@pytest.fixture
def sql_log(caplog):
    caplog.set_level(logging.INFO, logger="recordkit.connection")
    log = StatementLog(caplog)
    log.clear()
    return log
