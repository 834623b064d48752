"""Run the Alembic revisions against a scratch SQLite database."""

import importlib.util
from pathlib import Path

import pytest
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine
from sqlalchemy import inspect
from sqlalchemy import text

VERSIONS_DIR = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def _load_revision(filename: str):
    spec = importlib.util.spec_from_file_location(filename, VERSIONS_DIR / f"{filename}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


initial = _load_revision("a1c0ffee0001_initial_contacts_schema")
add_primary = _load_revision("b2c0ffee0002_add_is_primary_to_email_addresses")


def _run(connection, migration_fn):
    ctx = MigrationContext.configure(connection)
    with Operations.context(ctx):
        migration_fn()


@pytest.fixture
def connection():
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        yield conn
    engine.dispose()


def _seed(connection):
    connection.execute(
        text(
            "INSERT INTO contacts (id, title, first_name, last_name, dob) VALUES "
            "('c1', 'Mrs', 'Ada', 'Lovelace', '1815-12-10'), "
            "('c2', 'Dr', 'Grace', 'Hopper', '1906-12-09')"
        )
    )
    connection.execute(
        text(
            "INSERT INTO email_addresses (id, type, email, contact_id) VALUES "
            "('e1', 'home', 'ada@example.com', 'c1'), "
            "('e2', 'work', 'ada@engine.example.com', 'c1'), "
            "('e3', 'work', 'grace@navy.example.com', 'c2')"
        )
    )


def _primary_flags(connection):
    rows = connection.execute(text("SELECT id, is_primary FROM email_addresses ORDER BY id")).all()
    return {row[0]: bool(row[1]) for row in rows}


def test_revision_chain():
    assert initial.down_revision is None
    assert add_primary.down_revision == initial.revision


def test_initial_schema(connection):
    _run(connection, initial.upgrade)

    tables = set(inspect(connection).get_table_names())
    assert {"contacts", "email_addresses", "addresses"} <= tables


def test_add_is_primary_defaults_to_false(connection, monkeypatch):
    monkeypatch.delenv(add_primary.PRIMARY_IDS_ENV, raising=False)
    _run(connection, initial.upgrade)
    _seed(connection)

    _run(connection, add_primary.upgrade)

    assert _primary_flags(connection) == {"e1": False, "e2": False, "e3": False}


def test_backfill_keeps_one_primary_per_contact(connection, monkeypatch):
    monkeypatch.setenv(add_primary.PRIMARY_IDS_ENV, "e2, e1, missing, e3")
    _run(connection, initial.upgrade)
    _seed(connection)

    _run(connection, add_primary.upgrade)

    assert _primary_flags(connection) == {"e1": False, "e2": True, "e3": True}


def test_backfill_helper_reports_updates(connection):
    _run(connection, initial.upgrade)
    _seed(connection)
    connection.execute(text("ALTER TABLE email_addresses ADD COLUMN is_primary BOOLEAN NOT NULL DEFAULT 0"))

    assert add_primary.backfill_primary_flags(connection, ["e1", "e2"]) == 1
    assert add_primary.backfill_primary_flags(connection, []) == 0


def test_upgrade_is_skipped_when_column_exists(connection, monkeypatch):
    monkeypatch.delenv(add_primary.PRIMARY_IDS_ENV, raising=False)
    _run(connection, initial.upgrade)
    _run(connection, add_primary.upgrade)

    _run(connection, add_primary.upgrade)

    columns = [c["name"] for c in inspect(connection).get_columns("email_addresses")]
    assert columns.count("is_primary") == 1


def test_downgrade_round_trip(connection, monkeypatch):
    monkeypatch.delenv(add_primary.PRIMARY_IDS_ENV, raising=False)
    _run(connection, initial.upgrade)
    _run(connection, add_primary.upgrade)

    _run(connection, add_primary.downgrade)
    columns = [c["name"] for c in inspect(connection).get_columns("email_addresses")]
    assert "is_primary" not in columns

    _run(connection, initial.downgrade)
    assert inspect(connection).get_table_names() == []
