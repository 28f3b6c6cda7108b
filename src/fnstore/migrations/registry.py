"""
Migration Registry for fnstore

Discovers, orders and links the available datastore migrations.

Features:
- Auto-discovery of migrations from the versions package
- Duplicate version detection
- Deterministic ordering with previous/next linkage
- Sealing: once linked the registry is read-only
- Lookup of the migration matching a recorded version
"""

import importlib
import inspect
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import NotFoundError
from .migration_base import NO_PREVIOUS, MigrationBase

logger = logging.getLogger(__name__)

DEFAULT_VERSIONS_PACKAGE = "fnstore.migrations.versions"


def sort_and_link(migrations: Sequence[MigrationBase]) -> List[MigrationBase]:
    """
    Sort migrations by version and populate previous/next on each.

    previous/next are set in place. Calling this again on an already linked
    sequence changes nothing.

    Args:
        migrations: Migrations with unique versions, in any order

    Returns:
        New list sorted ascending by version
    """
    ordered = sorted(migrations, key=lambda m: m.version)

    for i, migration in enumerate(ordered):
        prev = NO_PREVIOUS
        if i > 0:
            prev = ordered[i - 1].version
            ordered[i - 1].next = migration.version
        migration.previous = prev

    if ordered:
        ordered[-1].next = None

    return ordered


class MigrationRegistry:
    """
    Migration Registry - Discovers and orders available migrations

    Pattern: Build once at startup (register/discover), then seal
    Lifetime: Owned by a MigrationEngine; never mutated after sealing

    Example:
        registry = MigrationRegistry()
        registry.discover()
        registry.seal()
        for migration in registry.get_pending_migrations(current_version=3):
            print(f"Apply {migration}")
    """

    def __init__(self, versions_package: str = DEFAULT_VERSIONS_PACKAGE):
        """
        Initialize Migration Registry.

        Args:
            versions_package: Python package containing migration modules
        """
        self.versions_package = versions_package
        self._migrations: Dict[int, MigrationBase] = {}
        self._ordered: Tuple[MigrationBase, ...] = ()
        self._discovered = False
        self._sealed = False

    @classmethod
    def default(cls) -> "MigrationRegistry":
        """Build the sealed registry of shipped migrations."""
        registry = cls()
        registry.discover()
        return registry.seal()

    @classmethod
    def from_migrations(cls, migrations: Sequence[MigrationBase]) -> "MigrationRegistry":
        """Build a sealed registry from explicit migrations (no discovery)."""
        registry = cls()
        registry._discovered = True
        for migration in migrations:
            registry.register(migration)
        return registry.seal()

    def discover(self) -> None:
        """
        Discover and register all migrations from the versions package.

        Imports every ``v*.py`` module in the package and registers each
        MigrationBase subclass defined there.

        Raises:
            ImportError: If a migration module fails to import
            ValueError: If a migration cannot be instantiated or is a duplicate
        """
        if self._discovered:
            return

        try:
            package = importlib.import_module(self.versions_package)
        except ModuleNotFoundError:
            logger.debug(f"No migrations package '{self.versions_package}'")
            self._discovered = True
            return

        package_path = Path(package.__file__).parent

        for module_file in sorted(package_path.glob("v*.py")):
            module_name = f"{self.versions_package}.{module_file.stem}"
            module = importlib.import_module(module_name)

            for name, obj in inspect.getmembers(module, inspect.isclass):
                if (issubclass(obj, MigrationBase) and
                        not inspect.isabstract(obj) and
                        obj.__module__ == module_name):
                    try:
                        migration = obj()
                    except Exception as e:
                        raise ValueError(
                            f"Failed to instantiate migration {name} in {module_name}: {e}"
                        ) from e
                    self.register(migration)

        logger.debug(f"Discovered {len(self._migrations)} migrations in '{self.versions_package}'")
        self._discovered = True

    def register(self, migration: MigrationBase) -> None:
        """
        Register a migration.

        Raises:
            RuntimeError: If the registry is already sealed
            ValueError: If the version is already registered
        """
        if self._sealed:
            raise RuntimeError("migration registry is sealed")

        if migration.version in self._migrations:
            existing = self._migrations[migration.version]
            raise ValueError(
                f"Duplicate migration version {migration.version}: "
                f"{migration} conflicts with {existing}"
            )

        self._migrations[migration.version] = migration

    def seal(self) -> "MigrationRegistry":
        """Sort and link the registered migrations and forbid further changes."""
        if not self._sealed:
            self._ordered = tuple(sort_and_link(list(self._migrations.values())))
            self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def migrations(self) -> Tuple[MigrationBase, ...]:
        """All migrations, ascending by version."""
        if not self._sealed:
            if not self._discovered:
                self.discover()
            self.seal()
        return self._ordered

    def current(self, version: int) -> MigrationBase:
        """
        Get the migration that is the given recorded version.

        Raises:
            NotFoundError: If no migration has exactly this version
        """
        migration = self.get_migration(version)
        if migration is None:
            raise NotFoundError(version)
        return migration

    def get_migration(self, version: int) -> Optional[MigrationBase]:
        """Get a specific migration by version, or None."""
        for migration in self.migrations:
            if migration.version == version:
                return migration
        return None

    def get_pending_migrations(self, current_version: int) -> List[MigrationBase]:
        """
        Get migrations that need to be applied.

        Returns all migrations with version > current_version, ascending.
        """
        return [m for m in self.migrations if m.version > current_version]

    def get_latest_version(self) -> int:
        """Highest migration version, or 0 when there are none."""
        if not self.migrations:
            return 0
        return self.migrations[-1].version

    def __len__(self) -> int:
        return len(self.migrations)

    def __iter__(self) -> Iterator[MigrationBase]:
        return iter(self.migrations)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<MigrationRegistry: {len(self._migrations)} migrations, sealed={self._sealed}>"
