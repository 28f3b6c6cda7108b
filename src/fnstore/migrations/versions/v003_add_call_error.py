"""Migration v003: Add error to calls."""

from fnstore.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    version = 3
    description = "Add error column to calls"

    def up(self, db) -> None:
        db.add_column("calls", "error", "text")

    def down(self, db) -> None:
        db.drop_column("calls", "error")
