"""Migration v005: Add created_at to apps."""

from fnstore.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    version = 5
    description = "Add created_at column to apps"

    def up(self, db) -> None:
        db.add_column("apps", "created_at", "varchar(256)")

    def down(self, db) -> None:
        db.drop_column("apps", "created_at")
