"""
Migration v002: Add stats to calls

Stores the JSON encoded resource statistics collected while a call ran.
"""

from fnstore.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    version = 2
    description = "Add stats column to calls"

    def up(self, db) -> None:
        db.add_column("calls", "stats", "text")

    def down(self, db) -> None:
        db.drop_column("calls", "stats")
