"""
Migration error taxonomy.

- ConnectivityError: database unreachable or a bookkeeping statement failed
- DirtyStateError: a previous run left a migration half-applied (fatal)
- NotFoundError: no migration is registered for a requested version
- MigrationError: a forward or reverse action failed
- MigrationCancelled: cancellation was signalled between migrations
- NoNextVersion: the version table holds no applied row (fresh database)
"""

from typing import Optional


class MigrationsError(Exception):
    """Base class for all migration errors."""
    pass


class ConnectivityError(MigrationsError):
    """Raised when the database cannot be reached or queried."""
    pass


class DirtyStateError(MigrationsError):
    """
    Raised when version state records an unfinished migration run.

    This is terminal: the schema is in an unknown state and must be
    repaired by an operator before the service can start.
    """

    fatal = True

    def __init__(self, version: int, source: str):
        self.version = version
        self.source = source
        super().__init__(
            f"{source} version state is dirty at version {version}; "
            f"repair the schema manually before retrying"
        )


class NotFoundError(MigrationsError):
    """Raised when no migration is registered for a version."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"no migration registered for version {version}")


class MigrationError(MigrationsError):
    """Raised when a migration action fails. Carries the failing version."""

    def __init__(self, version: int, direction: str, message: Optional[str] = None):
        self.version = version
        self.direction = direction
        super().__init__(message or f"migration {version} failed ({direction})")


class MigrationCancelled(MigrationsError):
    """Raised when cancellation is observed before a migration starts."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"cancelled before migration {version} started")


class NoNextVersion(MigrationsError):
    """The version table exists but records no applied version."""
    pass
