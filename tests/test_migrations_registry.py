"""
Tests for migration ordering and the migration registry
"""
import pytest
from hypothesis import given, strategies as st
from unittest.mock import patch

from fnstore.migrations.errors import NotFoundError
from fnstore.migrations.migration_base import FunctionMigration, MigrationBase, NO_PREVIOUS
from fnstore.migrations.registry import MigrationRegistry, sort_and_link


class SampleMigration1(MigrationBase):
    """Sample migration v1"""
    version = 1
    description = "Sample migration 1"

    def up(self, db):
        pass

    def down(self, db):
        pass


class SampleMigration2(MigrationBase):
    """Sample migration v2"""
    version = 2
    description = "Sample migration 2"

    def up(self, db):
        pass

    def down(self, db):
        pass


class SampleMigration5(MigrationBase):
    """Sample migration v5 (gap after 2)"""
    version = 5
    description = "Sample migration 5"

    def up(self, db):
        pass

    def down(self, db):
        pass


def noop(db):
    pass


class TestMigrationBase:
    """Test Migration Record validation"""

    def test_missing_version(self):
        class NoVersion(MigrationBase):
            description = "no version"

            def up(self, db):
                pass

            def down(self, db):
                pass

        with pytest.raises(ValueError, match="must define 'version'"):
            NoVersion()

    def test_version_must_be_positive(self):
        with pytest.raises(ValueError, match="must be >= 1"):
            FunctionMigration(0, noop, noop, description="zero")

    def test_missing_description(self):
        class NoDescription(MigrationBase):
            version = 3

            def up(self, db):
                pass

            def down(self, db):
                pass

        with pytest.raises(ValueError, match="must define 'description'"):
            NoDescription()

    def test_unlinked_defaults(self):
        migration = SampleMigration1()
        assert migration.previous == NO_PREVIOUS
        assert migration.next is None

    def test_function_migration_calls_through(self):
        calls = []
        migration = FunctionMigration(
            4, lambda db: calls.append(("up", db)), lambda db: calls.append(("down", db))
        )

        migration.up("handle")
        migration.down("handle")

        assert calls == [("up", "handle"), ("down", "handle")]
        assert migration.description == "<lambda>"

    def test_ordering_and_equality(self):
        assert SampleMigration1() < SampleMigration2()
        assert SampleMigration1() == SampleMigration1()
        assert len({SampleMigration1(), SampleMigration1()}) == 1


class TestSortAndLink:
    """Test ordering and previous/next linkage"""

    def test_links_sorted_sequence(self):
        m5, m1, m2 = SampleMigration5(), SampleMigration1(), SampleMigration2()

        ordered = sort_and_link([m5, m1, m2])

        assert [m.version for m in ordered] == [1, 2, 5]
        assert [m.previous for m in ordered] == [-1, 1, 2]
        assert [m.next for m in ordered] == [2, 5, None]

    def test_idempotent(self):
        ordered = sort_and_link([SampleMigration2(), SampleMigration1()])
        before = [(m.version, m.previous, m.next) for m in ordered]

        again = sort_and_link(ordered)

        assert [(m.version, m.previous, m.next) for m in again] == before

    def test_empty(self):
        assert sort_and_link([]) == []

    @given(st.sets(st.integers(min_value=1, max_value=10_000), max_size=40))
    def test_linkage_property(self, versions):
        migrations = [FunctionMigration(v, noop, noop, description=f"m{v}") for v in versions]

        ordered = sort_and_link(migrations)

        assert [m.version for m in ordered] == sorted(versions)
        if ordered:
            assert ordered[0].previous == -1
            assert ordered[-1].next is None
        for left, right in zip(ordered, ordered[1:]):
            assert left.next == right.version
            assert right.previous == left.version


class TestMigrationRegistry:
    """Test MigrationRegistry functionality"""

    def test_init(self):
        """Test registry initialization"""
        registry = MigrationRegistry()
        assert registry.versions_package == "fnstore.migrations.versions"
        assert registry._discovered is False
        assert registry.sealed is False

    def test_discover_no_package(self):
        """Test discovery when versions package doesn't exist"""
        registry = MigrationRegistry(versions_package="nonexistent.package")

        registry.discover()

        assert registry._discovered is True
        assert len(registry.seal()) == 0

    def test_register_duplicate_version(self):
        """Test registering duplicate version fails"""
        registry = MigrationRegistry()
        registry.register(SampleMigration1())

        with pytest.raises(ValueError, match="Duplicate migration version"):
            registry.register(SampleMigration1())

    def test_register_after_seal(self):
        """Sealed registries reject new migrations"""
        registry = MigrationRegistry.from_migrations([SampleMigration1()])

        with pytest.raises(RuntimeError, match="sealed"):
            registry.register(SampleMigration2())

    def test_gaps_are_allowed(self):
        registry = MigrationRegistry.from_migrations([SampleMigration5(), SampleMigration1()])

        assert [m.version for m in registry] == [1, 5]
        assert registry.get_latest_version() == 5

    def test_migrations_property_discovers_lazily(self):
        registry = MigrationRegistry()

        with patch.object(registry, 'discover') as mock_discover:
            registry.migrations

        mock_discover.assert_called_once()

    def test_current_exact_match(self):
        registry = MigrationRegistry.from_migrations([SampleMigration1(), SampleMigration5()])

        assert registry.current(5).version == 5

    @pytest.mark.parametrize("version", [0, -1, 3, 99])
    def test_current_not_found(self, version):
        registry = MigrationRegistry.from_migrations([SampleMigration1(), SampleMigration5()])

        with pytest.raises(NotFoundError) as exc_info:
            registry.current(version)

        assert exc_info.value.version == version

    def test_get_migration_not_found(self):
        registry = MigrationRegistry.from_migrations([SampleMigration1()])

        assert registry.get_migration(999) is None

    def test_get_pending_migrations(self):
        registry = MigrationRegistry.from_migrations(
            [SampleMigration5(), SampleMigration2(), SampleMigration1()]
        )

        pending = registry.get_pending_migrations(current_version=1)

        assert [m.version for m in pending] == [2, 5]

    def test_get_pending_migrations_none_applied(self):
        registry = MigrationRegistry.from_migrations([SampleMigration1(), SampleMigration2()])

        assert len(registry.get_pending_migrations(current_version=-1)) == 2
        assert len(registry.get_pending_migrations(current_version=0)) == 2

    def test_get_latest_version_empty(self):
        registry = MigrationRegistry.from_migrations([])

        assert registry.get_latest_version() == 0

    def test_default_registry_discovers_shipped_migrations(self):
        registry = MigrationRegistry.default()

        assert registry.sealed
        assert [m.version for m in registry] == [1, 2, 3, 4, 5, 6, 7]
        assert registry.migrations[0].previous == -1
        assert registry.migrations[-1].next is None

    def test_repr(self):
        registry = MigrationRegistry.from_migrations([SampleMigration1()])
        assert "1 migrations" in repr(registry)
