"""Migration v006: Add updated_at to apps."""

from fnstore.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    version = 6
    description = "Add updated_at column to apps"

    def up(self, db) -> None:
        db.add_column("apps", "updated_at", "varchar(256)")

    def down(self, db) -> None:
        db.drop_column("apps", "updated_at")
