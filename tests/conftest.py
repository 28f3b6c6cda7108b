"""Pytest fixtures for fnstore migration tests"""
import sqlite3
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fnstore.migrations.dialect import SQLITE3, Session, VersionTracker
from fnstore.migrations.migration_base import FunctionMigration
from fnstore.migrations.registry import MigrationRegistry


@pytest.fixture
def conn(tmp_path):
    """Fresh on-disk SQLite database per test."""
    connection = sqlite3.connect(tmp_path / "fn.sqlite")
    yield connection
    connection.close()


@pytest.fixture
def db(conn):
    """Session over the test connection."""
    return Session(conn, SQLITE3)


@pytest.fixture
def tracker():
    return VersionTracker(SQLITE3)


class CallLog:
    """Records the order in which migration actions ran."""

    def __init__(self):
        self.calls = []

    @property
    def ups(self):
        return [v for direction, v in self.calls if direction == "up"]

    @property
    def downs(self):
        return [v for direction, v in self.calls if direction == "down"]


def recording_migration(version, log, fail_up=False, fail_down=False, transactional=True):
    """Migration that creates table m_<version> and logs each call."""

    def up(db):
        log.calls.append(("up", version))
        if fail_up:
            raise RuntimeError(f"boom in {version}")
        db.execute(f"CREATE TABLE m_{version} (id INTEGER PRIMARY KEY)")

    def down(db):
        log.calls.append(("down", version))
        if fail_down:
            raise RuntimeError(f"boom reversing {version}")
        db.execute(f"DROP TABLE m_{version}")

    return FunctionMigration(version, up, down,
                             description=f"create m_{version}",
                             transactional=transactional)


@pytest.fixture
def call_log():
    return CallLog()


@pytest.fixture
def make_registry(call_log):
    """Build a sealed registry of recording migrations for the given versions."""

    def _make(versions, **failures):
        migrations = []
        for version in versions:
            migrations.append(recording_migration(
                version, call_log,
                fail_up=version in failures.get("fail_up", ()),
                fail_down=version in failures.get("fail_down", ()),
                transactional=version not in failures.get("non_transactional", ()),
            ))
        return MigrationRegistry.from_migrations(migrations)

    return _make


def table_names(conn):
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row[0] for row in rows}


def column_names(conn, table):
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()}


def write_legacy_row(conn, version, dirty=False):
    conn.execute("CREATE TABLE schema_migrations (version bigint NOT NULL, dirty boolean NOT NULL)")
    conn.execute("INSERT INTO schema_migrations (version, dirty) VALUES (?, ?)", (version, dirty))
    conn.commit()


def write_version_row(conn, version, applied=True, dirty=False):
    conn.execute(
        "INSERT INTO fnstore_db_version (version_id, is_applied, dirty) VALUES (?, ?, ?)",
        (version, applied, dirty),
    )
    conn.commit()
