"""
fnstore - Datastore schema management for the functions platform

Creates the baseline tables, tracks which migrations a database has applied,
upgrades databases from the legacy schema_migrations table and rolls them
back to baseline.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .migrations import (
    ConnectivityError,
    DirtyStateError,
    FunctionMigration,
    MigrationBase,
    MigrationCancelled,
    MigrationEngine,
    MigrationError,
    MigrationRegistry,
    MigrationsError,
    NotFoundError,
    apply_migrations,
    down_all,
)
from .storage import init_database

__all__ = [
    "ConnectivityError",
    "DirtyStateError",
    "FunctionMigration",
    "MigrationBase",
    "MigrationCancelled",
    "MigrationEngine",
    "MigrationError",
    "MigrationRegistry",
    "MigrationsError",
    "NotFoundError",
    "apply_migrations",
    "down_all",
    "init_database",
]
