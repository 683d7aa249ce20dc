"""Tests for the recordkit command-line interface."""

import pytest

from recordkit import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)


@pytest.fixture
def cli_args(tmp_path, schema_file):
    return ["--db-file", str(tmp_path / "cli.db"), "--schema-file", str(schema_file)]


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_reset(cli_args, tmp_path, capsys):
    assert cli.main([*cli_args, "reset"]) == 0

    assert (tmp_path / "cli.db").exists()
    assert "Reset" in capsys.readouterr().out


def test_columns(cli_args, capsys):
    cli.main([*cli_args, "reset"])
    capsys.readouterr()

    assert cli.main([*cli_args, "columns", "humans"]) == 0
    assert capsys.readouterr().out.split() == ["id", "fname", "lname", "house_id"]


def test_sql_query_with_params(cli_args, capsys):
    cli.main([*cli_args, "reset"])
    capsys.readouterr()

    assert cli.main([*cli_args, "sql", "SELECT id, name FROM cats WHERE owner_id = ?", "3"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines == ["id\tname", "3\tHaskell", "4\tMarkov"]


def test_sql_write_keeps_data(cli_args, capsys):
    cli.main([*cli_args, "reset"])
    cli.main([*cli_args, "sql", "DELETE FROM cats WHERE id = ?", "5"])
    capsys.readouterr()

    cli.main([*cli_args, "sql", "SELECT count(*) AS n FROM cats"])
    assert capsys.readouterr().out.splitlines() == ["n", "4"]


def test_database_error_exit_code(cli_args):
    cli.main([*cli_args, "reset"])
    assert cli.main([*cli_args, "sql", "SELECT * FROM dogs"]) == 1
