"""
Migration v007: Add cpus to routes

Nullable: routes without a CPU quota leave it unset.
"""

from fnstore.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    version = 7
    description = "Add cpus column to routes"

    def up(self, db) -> None:
        db.add_column("routes", "cpus", "int")

    def down(self, db) -> None:
        db.drop_column("routes", "cpus")
