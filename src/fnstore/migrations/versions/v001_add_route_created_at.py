"""
Migration v001: Add created_at to routes

Routes created before this change have a NULL created_at.
"""

from fnstore.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    """Add created_at text column to routes."""

    version = 1
    description = "Add created_at column to routes"

    def up(self, db) -> None:
        # Databases created by the old full-schema bootstrap already have it
        db.add_column("routes", "created_at", "text")

    def down(self, db) -> None:
        db.drop_column("routes", "created_at")
