"""Migration v004: Add updated_at to routes."""

from fnstore.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    version = 4
    description = "Add updated_at column to routes"

    def up(self, db) -> None:
        db.add_column("routes", "updated_at", "varchar(256)")

    def down(self, db) -> None:
        db.drop_column("routes", "updated_at")
