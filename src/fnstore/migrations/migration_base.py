"""
Migration Base Class

A migration is a single versioned, reversible schema change. All migrations
inherit from MigrationBase and implement up() and down().

Pattern:
- Each migration has a unique, strictly positive version number
- up() applies the change, down() undoes it
- previous/next are populated by the registry once it is sorted
- Migrations are applied in ascending and reversed in descending version order
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

# previous for the first migration in sorted order
NO_PREVIOUS = -1


class MigrationBase(ABC):
    """
    Abstract base class for datastore migrations.

    All migrations must define:
    - version: Unique integer version number (>= 1)
    - description: Human-readable description of the change
    - up(): Apply the change
    - down(): Undo the change

    Example:
        class AddRouteCpus(MigrationBase):
            version = 7
            description = "Add cpus column to routes"

            def up(self, db) -> None:
                db.add_column("routes", "cpus", "int")

            def down(self, db) -> None:
                db.drop_column("routes", "cpus")

    Set ``transactional = False`` for changes that cannot run inside a
    transaction; the version tracker then records them as dirty until they
    finish.
    """

    # Subclasses must define these
    version: int
    description: str

    transactional: bool = True

    def __init__(self):
        """Initialize migration and validate required attributes."""
        if not isinstance(getattr(self, 'version', None), int) or isinstance(self.version, bool):
            raise ValueError(
                f"{self.__class__.__name__} must define 'version' as an integer"
            )
        if not isinstance(getattr(self, 'description', None), str):
            raise ValueError(
                f"{self.__class__.__name__} must define 'description' as a string"
            )
        if self.version < 1:
            raise ValueError(
                f"Migration version must be >= 1, got {self.version}"
            )
        self.previous: int = NO_PREVIOUS
        self.next: Optional[int] = None

    @abstractmethod
    def up(self, db: Any) -> None:
        """
        Apply the migration forward.

        Args:
            db: Session bound to the live connection. The version tracker
                owns commit/rollback.
        """
        pass

    @abstractmethod
    def down(self, db: Any) -> None:
        """
        Roll back the migration.

        Args:
            db: Session bound to the live connection.
        """
        pass

    def validate(self) -> None:
        """
        Optional validation before up() runs.

        Raises:
            Exception: If validation fails, the migration will not run.
        """
        pass

    def __repr__(self) -> str:
        """String representation for logging."""
        return f"<Migration v{self.version}: {self.description}>"

    def __eq__(self, other) -> bool:
        """Compare migrations by version."""
        if not isinstance(other, MigrationBase):
            return False
        return self.version == other.version

    def __lt__(self, other) -> bool:
        """Order migrations by version."""
        if not isinstance(other, MigrationBase):
            return NotImplemented
        return self.version < other.version

    def __hash__(self) -> int:
        """Hash by version for use in sets/dicts."""
        return hash(self.version)


class FunctionMigration(MigrationBase):
    """Migration built from a pair of plain callables taking the session."""

    def __init__(self,
                 version: int,
                 up: Callable[[Any], None],
                 down: Callable[[Any], None],
                 description: str = "",
                 transactional: bool = True):
        self.version = version
        self.description = description or getattr(up, "__name__", f"migration {version}")
        self.transactional = transactional
        self._up = up
        self._down = down
        super().__init__()

    def up(self, db: Any) -> None:
        self._up(db)

    def down(self, db: Any) -> None:
        self._down(db)
