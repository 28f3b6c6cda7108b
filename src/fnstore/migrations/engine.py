"""
Migration Engine

Brings a live datastore up to date at startup, or reverses it to baseline.

Flow for apply:
1. Create the baseline tables if absent
2. Resolve the outstanding migrations (legacy + modern version state)
3. Apply each in ascending order, stopping on the first failure

Flow for down_all:
1. Refuse dirty version state
2. Reverse the migration matching the recorded version, newest first,
   until the recorded version reaches baseline (0)

Both run synchronously on the caller's connection, which must not be used
by anyone else meanwhile.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, List, Optional

from ..storage.schema import init_database
from .dialect import Session, VersionTracker, get_dialect
from .errors import MigrationCancelled, MigrationError, NotFoundError
from .migration_base import MigrationBase
from .registry import MigrationRegistry
from .resolver import Resolution, VersionResolver

logger = logging.getLogger(__name__)

BASELINE_VERSION = 0


@dataclass(frozen=True)
class MigrationStatus:
    """Applied/pending state of one migration."""
    version: int
    description: str
    applied: bool

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "description": self.description,
            "applied": self.applied,
        }


class MigrationEngine:
    """
    Migration Engine - Applies and reverses migrations on one connection

    Pattern: Registry is built and sealed once, then owned by the engine
    Lifetime: Process startup

    Example:
        engine = MigrationEngine(MigrationRegistry.default(), "sqlite3")
        engine.apply_outstanding(conn)
    """

    def __init__(self, registry: MigrationRegistry, driver: str):
        """
        Args:
            registry: Migrations to manage; sealed here if not already
            driver: Dialect name (sqlite3, postgres, mysql)
        """
        self.registry = registry.seal()
        self.dialect = get_dialect(driver)
        self.tracker = VersionTracker(self.dialect)
        self.resolver = VersionResolver(self.registry, self.tracker)

    def session(self, conn: Any) -> Session:
        return Session(conn, self.dialect)

    def bootstrap(self, conn: Any) -> None:
        """Create baseline tables and the version table if they are absent."""
        db = self.session(conn)
        init_database(db)
        self.tracker.ensure_version_table(db)

    def resolve(self, conn: Any) -> Resolution:
        return self.resolver.resolve(self.session(conn))

    def current_version(self, conn: Any) -> int:
        """Authoritative recorded version."""
        return self.resolve(conn).current_version

    def status(self, conn: Any) -> List[MigrationStatus]:
        """Every registered migration with whether it is applied."""
        resolution = self.resolve(conn)
        pending = {m.version for m in resolution.outstanding}
        return [
            MigrationStatus(m.version, m.description, m.version not in pending)
            for m in self.registry
        ]

    def apply_outstanding(self, conn: Any,
                          cancel: Optional[threading.Event] = None) -> List[int]:
        """
        Apply every outstanding migration in ascending order.

        Args:
            conn: Live DB-API connection
            cancel: Checked before each migration starts

        Returns:
            Versions applied, in order

        Raises:
            DirtyStateError: If version state records an unfinished run
            MigrationError: On the first failing migration; later ones are not run
            MigrationCancelled: If cancel was set before a migration started
            ConnectivityError: If the database cannot be queried
        """
        self.bootstrap(conn)
        db = self.session(conn)
        resolution = self.resolver.resolve(db)

        if resolution.up_to_date:
            logger.info(f"No migrations to run. Current version: {resolution.current_version}")
            return []

        logger.debug(f"Migrations to apply: {len(resolution.outstanding)}")
        applied = []
        for migration in resolution.outstanding:
            self._check_cancelled(cancel, migration)
            self._run(db, migration, "up")
            applied.append(migration.version)

        logger.info(f"Datastore migrated to version {applied[-1]}")
        return applied

    def down_all(self, conn: Any,
                 cancel: Optional[threading.Event] = None) -> List[int]:
        """
        Reverse migrations newest first until the recorded version is baseline.

        Stops quietly when the recorded version has no registered migration.
        Each reversal must strictly lower the recorded version, so the loop
        runs at most len(registry) + 1 passes: one per registered migration
        and one more that finds the baseline.

        Returns:
            Versions reversed, in order

        Raises:
            DirtyStateError: If version state records an unfinished run
            MigrationError: If a reversal fails or does not lower the version
            MigrationCancelled: If cancel was set before a reversal started
        """
        db = self.session(conn)
        _legacy, modern = self.resolver.read_states(db)
        version = modern.version
        reversed_versions = []

        for _ in range(len(self.registry) + 1):
            if version <= BASELINE_VERSION:
                break
            try:
                migration = self.registry.current(version)
            except NotFoundError:
                logger.info(f"No migration registered for version {version}, stopping")
                break

            self._check_cancelled(cancel, migration)
            self._run(db, migration, "down")
            reversed_versions.append(migration.version)

            next_version = self.resolver.read_states(db)[1].version
            if next_version >= version:
                raise MigrationError(
                    migration.version, "down",
                    f"reversing migration {migration.version} left the recorded "
                    f"version at {next_version}"
                )
            version = next_version

        logger.info(f"No migrations to reverse. Current version: {version}")
        return reversed_versions

    def _run(self, db: Session, migration: MigrationBase, direction: str) -> None:
        verb = "Applying" if direction == "up" else "Reversing"
        logger.info(f"{verb} migration {migration.version}: {migration.description}")
        start_time = time.time()
        try:
            if direction == "up":
                self.tracker.up(db, migration)
            else:
                self.tracker.down(db, migration)
        except MigrationError as e:
            logger.error(f"Migration {migration.version} failed: {e}")
            raise
        logger.info(
            f"Migration {migration.version} {direction} completed in "
            f"{time.time() - start_time:.3f}s"
        )

    @staticmethod
    def _check_cancelled(cancel: Optional[threading.Event], migration: MigrationBase) -> None:
        if cancel is not None and cancel.is_set():
            logger.warning(f"Cancelled before migration {migration.version}")
            raise MigrationCancelled(migration.version)


def apply_migrations(driver: str, conn: Any,
                     cancel: Optional[threading.Event] = None,
                     registry: Optional[MigrationRegistry] = None) -> List[int]:
    """
    Bootstrap the datastore and apply outstanding migrations.

    Args:
        driver: Dialect name (sqlite3, postgres, mysql)
        conn: Live DB-API connection, owned by the caller
        cancel: Optional event checked between migrations
        registry: Migrations to apply (default: shipped migrations)

    Returns:
        Versions applied, in order
    """
    if registry is None:
        registry = MigrationRegistry.default()
    engine = MigrationEngine(registry, driver)
    return engine.apply_outstanding(conn, cancel=cancel)


def down_all(driver: str, conn: Any,
             cancel: Optional[threading.Event] = None,
             registry: Optional[MigrationRegistry] = None) -> List[int]:
    """Reverse all recorded migrations down to baseline."""
    if registry is None:
        registry = MigrationRegistry.default()
    engine = MigrationEngine(registry, driver)
    return engine.down_all(conn, cancel=cancel)
