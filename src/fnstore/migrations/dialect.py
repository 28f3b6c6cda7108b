"""
SQL dialects and the modern version-tracking table.

The version table records one row per applied version:

    fnstore_db_version(id, version_id, is_applied, dirty, tstamp)

A fresh table is seeded with an applied row for version 0 (the baseline).
Applying a migration inserts an applied row in the same transaction as the
schema change; reversing it deletes that version's rows.

Works with any DB-API 2.0 connection; the dialect supplies the parameter
style and catalog queries for its driver.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import ConnectivityError, MigrationError, MigrationsError, NoNextVersion
from .migration_base import MigrationBase

logger = logging.getLogger(__name__)

VERSION_TABLE = "fnstore_db_version"


@dataclass(frozen=True)
class Dialect:
    """SQL flavor for one driver."""
    name: str
    param: str
    create_version_table: str
    table_exists_sql: str
    column_exists_sql: str
    explicit_begin: bool = False

    def sql(self, statement: str) -> str:
        """
        Substitute the driver's placeholder for ``?``.

        For format-style drivers, ``%`` is doubled and ``?`` inside quoted
        literals or identifiers is left alone.
        """
        if self.param == "?":
            return statement

        out = []
        quote = None
        for char in statement:
            if char == "%":
                out.append("%%")
                continue
            if quote:
                if char == quote:
                    quote = None
            elif char in ("'", '"'):
                quote = char
            elif char == "?":
                out.append(self.param)
                continue
            out.append(char)
        return "".join(out)


SQLITE3 = Dialect(
    name="sqlite3",
    param="?",
    create_version_table=f"""CREATE TABLE {VERSION_TABLE} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        version_id INTEGER NOT NULL,
        is_applied INTEGER NOT NULL,
        dirty INTEGER NOT NULL DEFAULT 0,
        tstamp TIMESTAMP DEFAULT (datetime('now'))
    )""",
    table_exists_sql="SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
    column_exists_sql="SELECT 1 FROM pragma_table_info(?) WHERE name = ?",
    explicit_begin=True,
)

POSTGRES = Dialect(
    name="postgres",
    param="%s",
    create_version_table=f"""CREATE TABLE {VERSION_TABLE} (
        id serial NOT NULL,
        version_id bigint NOT NULL,
        is_applied boolean NOT NULL,
        dirty boolean NOT NULL DEFAULT false,
        tstamp timestamp NULL default now(),
        PRIMARY KEY(id)
    )""",
    table_exists_sql=(
        "SELECT 1 FROM information_schema.tables "
        "WHERE table_schema = current_schema() AND table_name = ?"
    ),
    column_exists_sql=(
        "SELECT 1 FROM information_schema.columns "
        "WHERE table_schema = current_schema() AND table_name = ? AND column_name = ?"
    ),
)

MYSQL = Dialect(
    name="mysql",
    param="%s",
    create_version_table=f"""CREATE TABLE {VERSION_TABLE} (
        id serial NOT NULL,
        version_id bigint NOT NULL,
        is_applied boolean NOT NULL,
        dirty boolean NOT NULL DEFAULT false,
        tstamp timestamp NULL default now(),
        PRIMARY KEY(id)
    )""",
    table_exists_sql=(
        "SELECT 1 FROM information_schema.tables "
        "WHERE table_schema = DATABASE() AND table_name = ?"
    ),
    column_exists_sql=(
        "SELECT 1 FROM information_schema.columns "
        "WHERE table_schema = DATABASE() AND table_name = ? AND column_name = ?"
    ),
)

DIALECTS: Dict[str, Dialect] = {
    "sqlite3": SQLITE3,
    "sqlite": SQLITE3,
    "postgres": POSTGRES,
    "postgresql": POSTGRES,
    "mysql": MYSQL,
}


def get_dialect(name: str) -> Dialect:
    """
    Look up a dialect by driver name.

    Raises:
        ValueError: If the dialect is not supported
    """
    try:
        return DIALECTS[name.lower()]
    except KeyError:
        raise ValueError(
            f"unsupported dialect '{name}' (expected one of {sorted(set(DIALECTS))})"
        ) from None


class Session:
    """
    A live connection paired with its dialect.

    This is the database handle passed to migration actions. Statements use
    ``?`` placeholders regardless of the driver's parameter style.
    """

    def __init__(self, conn: Any, dialect: Dialect):
        self.conn = conn
        self.dialect = dialect

    def execute(self, statement: str, params: Sequence[Any] = ()) -> Any:
        cursor = self.conn.cursor()
        if params:
            cursor.execute(self.dialect.sql(statement), tuple(params))
        else:
            # format-style drivers only interpolate when params are given
            cursor.execute(statement)
        return cursor

    def fetchall(self, statement: str, params: Sequence[Any] = ()) -> List[Tuple]:
        cursor = self.execute(statement, params)
        try:
            return list(cursor.fetchall())
        finally:
            cursor.close()

    def table_exists(self, table: str) -> bool:
        return bool(self.fetchall(self.dialect.table_exists_sql, (table,)))

    def column_exists(self, table: str, column: str) -> bool:
        return bool(self.fetchall(self.dialect.column_exists_sql, (table, column)))

    def add_column(self, table: str, column: str, definition: str) -> None:
        """Add a column unless it is already there."""
        if not self.column_exists(table, column):
            self.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}").close()

    def drop_column(self, table: str, column: str) -> None:
        """Drop a column if it is present."""
        if self.column_exists(table, column):
            self.execute(f"ALTER TABLE {table} DROP COLUMN {column}").close()

    def begin(self) -> None:
        # sqlite3 does not open a transaction before DDL on its own
        if self.dialect.explicit_begin and not getattr(self.conn, "in_transaction", False):
            self.execute("BEGIN").close()

    def commit(self) -> None:
        self.conn.commit()

    def rollback(self) -> None:
        self.conn.rollback()


@dataclass(frozen=True)
class ModernVersionState:
    """Recorded version from the version table."""
    version: int
    dirty: bool = False
    source: str = "modern"


class VersionTracker:
    """
    Reads and writes the modern version table.

    Pattern: Append a row per applied version, newest row wins
    Lifetime: One per engine run

    Every bookkeeping failure is raised as ConnectivityError; failures of
    the migration action itself are raised as MigrationError.
    """

    def __init__(self, dialect: Dialect):
        self.dialect = dialect

    def ensure_version_table(self, db: Session) -> None:
        """Create the version table and seed the baseline row if missing."""
        try:
            if db.table_exists(VERSION_TABLE):
                return
            db.begin()
            db.execute(self.dialect.create_version_table).close()
            self._insert(db, 0, applied=True, dirty=False)
            db.commit()
            logger.debug(f"Created version table {VERSION_TABLE}")
        except MigrationsError:
            raise
        except Exception as e:
            self._rollback_quietly(db)
            raise ConnectivityError(f"failed to create {VERSION_TABLE}: {e}") from e

    def get_current_version(self, db: Session) -> ModernVersionState:
        """
        Get the recorded version.

        Walks rows newest first. A version whose newest row is not applied
        is skipped; the first applied version found is current.

        Raises:
            NoNextVersion: If the table records no applied version
            ConnectivityError: If the table cannot be read
        """
        self.ensure_version_table(db)
        try:
            rows = db.fetchall(
                f"SELECT version_id, is_applied, dirty FROM {VERSION_TABLE} ORDER BY id DESC"
            )
        except Exception as e:
            raise ConnectivityError(f"failed to read {VERSION_TABLE}: {e}") from e

        if rows and rows[0][2]:
            return ModernVersionState(int(rows[0][0]), dirty=True)

        skipped = set()
        for version_id, is_applied, _dirty in rows:
            if version_id in skipped:
                continue
            if is_applied:
                return ModernVersionState(int(version_id))
            skipped.add(version_id)

        raise NoNextVersion(f"{VERSION_TABLE} has no applied version")

    def up(self, db: Session, migration: MigrationBase) -> None:
        """Apply a migration and record its version."""
        self.ensure_version_table(db)
        if migration.transactional:
            self._run_in_transaction(db, migration, "up")
        else:
            self._run_marked_dirty(db, migration, "up")

    def down(self, db: Session, migration: MigrationBase) -> None:
        """Reverse a migration and remove its version."""
        self.ensure_version_table(db)
        if migration.transactional:
            self._run_in_transaction(db, migration, "down")
        else:
            self._run_marked_dirty(db, migration, "down")

    def _run_in_transaction(self, db: Session, migration: MigrationBase, direction: str) -> None:
        try:
            db.begin()
        except Exception as e:
            raise ConnectivityError(f"failed to begin transaction: {e}") from e

        try:
            self._call(db, migration, direction)
        except MigrationError:
            self._rollback_quietly(db)
            raise

        try:
            if direction == "up":
                self._insert(db, migration.version, applied=True, dirty=False)
            else:
                self._delete(db, migration.version)
            db.commit()
        except Exception as e:
            self._rollback_quietly(db)
            raise ConnectivityError(
                f"failed to record version {migration.version}: {e}"
            ) from e

    def _run_marked_dirty(self, db: Session, migration: MigrationBase, direction: str) -> None:
        # The dirty marker is committed first so a crash mid-action is detectable
        try:
            db.begin()
            self._insert(db, migration.version, applied=(direction == "down"), dirty=True)
            db.commit()
        except Exception as e:
            self._rollback_quietly(db)
            raise ConnectivityError(f"failed to mark version {migration.version} dirty: {e}") from e

        self._call(db, migration, direction)

        try:
            db.begin()
            if direction == "up":
                db.execute(
                    f"UPDATE {VERSION_TABLE} SET is_applied = ?, dirty = ? "
                    f"WHERE version_id = ? AND dirty = ?",
                    (True, False, migration.version, True),
                ).close()
            else:
                self._delete(db, migration.version)
            db.commit()
        except Exception as e:
            self._rollback_quietly(db)
            raise ConnectivityError(
                f"failed to record version {migration.version}: {e}"
            ) from e

    def _call(self, db: Session, migration: MigrationBase, direction: str) -> None:
        try:
            if direction == "up":
                migration.validate()
                migration.up(db)
            else:
                migration.down(db)
        except Exception as e:
            raise MigrationError(
                migration.version, direction,
                f"migration {migration.version} ({migration.description}) failed during {direction}: {e}"
            ) from e

    def _insert(self, db: Session, version: int, applied: bool, dirty: bool) -> None:
        db.execute(
            f"INSERT INTO {VERSION_TABLE} (version_id, is_applied, dirty) VALUES (?, ?, ?)",
            (version, applied, dirty),
        ).close()

    def _delete(self, db: Session, version: int) -> None:
        db.execute(f"DELETE FROM {VERSION_TABLE} WHERE version_id = ?", (version,)).close()

    def _rollback_quietly(self, db: Session) -> None:
        try:
            db.rollback()
        except Exception as e:
            logger.warning(f"Rollback failed: {e}")
