"""
Legacy single-row version table.

Databases created before the version table existed track their schema in

    schema_migrations(version bigint, dirty boolean)

holding at most one row. It is only read, never written.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .dialect import Session
from .errors import ConnectivityError

logger = logging.getLogger(__name__)

LEGACY_TABLE = "schema_migrations"


@dataclass(frozen=True)
class LegacyVersionState:
    """Version recorded by the legacy table."""
    version: int
    dirty: bool = False
    source: str = "legacy"


def read_legacy_state(db: Session) -> Optional[LegacyVersionState]:
    """
    Read the legacy version row.

    Returns:
        The recorded state, or None when the table is absent or empty

    Raises:
        ConnectivityError: If the table exists but cannot be read
    """
    try:
        if not db.table_exists(LEGACY_TABLE):
            return None
        rows = db.fetchall(f"SELECT version, dirty FROM {LEGACY_TABLE} LIMIT 1")
        if not rows:
            return None
        version, dirty = rows[0]
        state = LegacyVersionState(int(version), bool(dirty))
    except Exception as e:
        raise ConnectivityError(f"failed to read {LEGACY_TABLE}: {e}") from e

    logger.debug(f"Legacy migration table version is {state.version} (dirty={state.dirty})")
    return state
