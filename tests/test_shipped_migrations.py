"""Tests for the migrations shipped in fnstore.migrations.versions"""
import pytest

from fnstore.migrations.engine import MigrationEngine
from fnstore.migrations.registry import MigrationRegistry

from conftest import column_names, write_legacy_row

MIGRATED_COLUMNS = {
    "routes": {"created_at", "updated_at", "cpus"},
    "calls": {"stats", "error"},
    "apps": {"created_at", "updated_at"},
}

# Shape of a database created by the old bootstrap, which already had
# every column in its CREATE TABLE statements
OLD_FULL_SCHEMA = [
    """CREATE TABLE routes (
        app_name varchar(256) NOT NULL, path varchar(256) NOT NULL,
        image varchar(256) NOT NULL, format varchar(16) NOT NULL,
        memory int NOT NULL, cpus int, timeout int NOT NULL,
        idle_timeout int NOT NULL, type varchar(16) NOT NULL,
        headers text NOT NULL, config text NOT NULL, created_at text,
        updated_at varchar(256), PRIMARY KEY (app_name, path))""",
    """CREATE TABLE apps (
        name varchar(256) NOT NULL PRIMARY KEY, config text NOT NULL,
        created_at varchar(256), updated_at varchar(256))""",
]


@pytest.fixture
def engine():
    return MigrationEngine(MigrationRegistry.default(), "sqlite3")


def test_apply_adds_columns(engine, conn):
    engine.apply_outstanding(conn)

    for table, columns in MIGRATED_COLUMNS.items():
        assert columns <= column_names(conn, table)


def test_round_trip_restores_baseline(engine, conn):
    engine.apply_outstanding(conn)
    engine.down_all(conn)

    for table, columns in MIGRATED_COLUMNS.items():
        assert not columns & column_names(conn, table)
    assert engine.current_version(conn) == 0
    assert {"app_name", "path", "image"} <= column_names(conn, "routes")


def test_existing_data_survives(engine, conn):
    engine.bootstrap(conn)
    conn.execute("INSERT INTO apps (name, config) VALUES ('myapp', '{}')")
    conn.commit()

    engine.apply_outstanding(conn)

    row = conn.execute("SELECT name, created_at FROM apps").fetchone()
    assert row == ("myapp", None)


def test_old_full_schema_is_upgraded(engine, conn):
    for statement in OLD_FULL_SCHEMA:
        conn.execute(statement)
    write_legacy_row(conn, 3)

    applied = engine.apply_outstanding(conn)

    assert applied == [4, 5, 6, 7]
    assert MIGRATED_COLUMNS["routes"] <= column_names(conn, "routes")
