"""
Version Resolver

Decides which migrations a live database still needs, reconciling the
legacy single-row table with the modern version table.

The two generations are read once into a tagged state and normalized into a
single Resolution:

- legacy row dirty, or newest modern row dirty -> DirtyStateError
- legacy version v > 0 and modern version < v  -> legacy is authoritative,
  outstanding are the migrations strictly after v
- otherwise                                     -> modern is authoritative,
  outstanding are the migrations strictly after the modern version

A modern table with no applied row counts as version 0 (fresh database).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .dialect import ModernVersionState, Session, VersionTracker
from .errors import DirtyStateError, NoNextVersion
from .legacy import LegacyVersionState, read_legacy_state
from .migration_base import MigrationBase
from .registry import MigrationRegistry

logger = logging.getLogger(__name__)

VersionState = Union[LegacyVersionState, ModernVersionState]

# Legacy version reported when there is no legacy history
NO_LEGACY_VERSION = -1


@dataclass(frozen=True)
class Resolution:
    """Normalized view of what is applied and what is outstanding."""
    current_version: int
    outstanding: Tuple[MigrationBase, ...]
    authority: VersionState

    @property
    def up_to_date(self) -> bool:
        return not self.outstanding


class VersionResolver:
    """Resolves outstanding migrations for a live database."""

    def __init__(self, registry: MigrationRegistry, tracker: VersionTracker):
        self.registry = registry
        self.tracker = tracker

    def read_modern(self, db: Session) -> ModernVersionState:
        """Modern state; a table without applied rows reads as version 0."""
        try:
            return self.tracker.get_current_version(db)
        except NoNextVersion:
            logger.debug("No applied version recorded, treating database as fresh")
            return ModernVersionState(0)

    def read_states(self, db: Session) -> Tuple[Optional[LegacyVersionState], ModernVersionState]:
        """
        Read both version states and refuse dirty ones.

        Raises:
            DirtyStateError: If either state records an unfinished run
        """
        legacy = read_legacy_state(db)
        if legacy is not None and legacy.dirty:
            logger.critical(f"Legacy migration table is dirty at version {legacy.version}")
            raise DirtyStateError(legacy.version, legacy.source)

        modern = self.read_modern(db)
        if modern.dirty:
            logger.critical(f"Version table is dirty at version {modern.version}")
            raise DirtyStateError(modern.version, modern.source)

        return legacy, modern

    def resolve(self, db: Session) -> Resolution:
        """Determine the authoritative version and the outstanding migrations."""
        legacy, modern = self.read_states(db)
        authority = self.choose_authority(legacy, modern)

        outstanding = tuple(self.registry.get_pending_migrations(authority.version))
        logger.debug(
            f"Current datastore version is {authority.version} ({authority.source}), "
            f"{len(outstanding)} migrations outstanding"
        )
        return Resolution(authority.version, outstanding, authority)

    @staticmethod
    def choose_authority(legacy: Optional[LegacyVersionState],
                         modern: ModernVersionState) -> VersionState:
        """
        Pick the state that describes what is applied.

        Legacy wins only while the version table is strictly behind it.
        """
        legacy_version = legacy.version if legacy is not None else NO_LEGACY_VERSION
        if legacy_version > 0 and modern.version < legacy_version:
            return legacy
        return modern
