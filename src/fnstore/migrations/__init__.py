"""
fnstore Migration System

Keeps the datastore schema in step with the running code.

Key Features:
- Idempotent bootstrap of the baseline tables
- Version tracking in the fnstore_db_version table
- Detection of the legacy schema_migrations table and safe upgrade from it
- Ordered apply, full rollback to baseline
- Dirty state refusal
"""

from .dialect import Session, VersionTracker, get_dialect
from .engine import MigrationEngine, MigrationStatus, apply_migrations, down_all
from .errors import (
    ConnectivityError,
    DirtyStateError,
    MigrationCancelled,
    MigrationError,
    MigrationsError,
    NotFoundError,
)
from .migration_base import FunctionMigration, MigrationBase
from .registry import MigrationRegistry, sort_and_link

__all__ = [
    "ConnectivityError",
    "DirtyStateError",
    "FunctionMigration",
    "MigrationBase",
    "MigrationCancelled",
    "MigrationEngine",
    "MigrationError",
    "MigrationRegistry",
    "MigrationStatus",
    "MigrationsError",
    "NotFoundError",
    "Session",
    "VersionTracker",
    "apply_migrations",
    "down_all",
    "get_dialect",
    "sort_and_link",
]
