"""fnstore CLI - Migration Commands

Apply, reverse and inspect datastore migrations.
"""
import sys
from contextlib import closing

import click

from fnstore.migrations import (
    DirtyStateError,
    MigrationEngine,
    MigrationRegistry,
    MigrationsError,
)

# Local CLI imports
from .common import (
    EXIT_DIRTY,
    EXIT_ERROR,
    VERBOSITY_NORMAL,
    echo_error,
    echo_normal,
    echo_quiet,
    echo_verbose,
    open_connection,
)


def _engine(ctx) -> MigrationEngine:
    config = ctx.obj['config']
    try:
        return MigrationEngine(MigrationRegistry.default(), config["database"]["driver"])
    except ValueError as e:
        raise click.UsageError(str(e))


def _fail(error: MigrationsError) -> None:
    echo_error(str(error))
    if isinstance(error, DirtyStateError):
        sys.exit(EXIT_DIRTY)
    sys.exit(EXIT_ERROR)


@click.group()
@click.pass_context
def migrate_group(ctx):
    """Datastore migration commands."""
    ctx.ensure_object(dict)


@migrate_group.command('up')
@click.pass_context
def migrate_up(ctx) -> None:
    """Create baseline tables and apply outstanding migrations.

    Examples:
        fnstore migrate up
        fnstore -v migrate up
    """
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    engine = _engine(ctx)

    with closing(open_connection(ctx.obj['config'])) as conn:
        try:
            applied = engine.apply_outstanding(conn)
        except MigrationsError as e:
            _fail(e)

        if applied:
            for version in applied:
                echo_verbose(f"  applied {version}", verbosity)
            echo_normal(click.style(
                f"✓ Applied {len(applied)} migrations, now at version {applied[-1]}", fg="green"
            ), verbosity)
        else:
            echo_normal(click.style("✓ Datastore is up to date", fg="green"), verbosity)


@migrate_group.command('down-all')
@click.option('--yes', is_flag=True, default=False, help='Do not ask for confirmation')
@click.pass_context
def migrate_down_all(ctx, yes: bool) -> None:
    """Reverse every applied migration down to baseline.

    Examples:
        fnstore migrate down-all --yes
    """
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    if not yes:
        click.confirm("Reverse all migrations? Data in migrated columns will be lost", abort=True)

    engine = _engine(ctx)
    with closing(open_connection(ctx.obj['config'])) as conn:
        try:
            reversed_versions = engine.down_all(conn)
        except MigrationsError as e:
            _fail(e)

    echo_normal(click.style(
        f"✓ Reversed {len(reversed_versions)} migrations", fg="green"
    ), verbosity)


@migrate_group.command('status')
@click.pass_context
def migrate_status(ctx) -> None:
    """Show each migration and whether it is applied."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    engine = _engine(ctx)

    with closing(open_connection(ctx.obj['config'])) as conn:
        try:
            engine.bootstrap(conn)
            statuses = engine.status(conn)
        except MigrationsError as e:
            _fail(e)

    echo_normal(click.style("Migration Status", fg="cyan", bold=True), verbosity)
    echo_normal("=" * 50, verbosity)
    for status in statuses:
        if status.applied:
            state = click.style("applied", fg="green")
        else:
            state = click.style("pending", fg="yellow")
        echo_quiet(f"  {status.version:>4}  {state:18} {status.description}", verbosity)


@migrate_group.command('version')
@click.pass_context
def migrate_version(ctx) -> None:
    """Print the recorded datastore version."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    engine = _engine(ctx)

    with closing(open_connection(ctx.obj['config'])) as conn:
        try:
            version = engine.current_version(conn)
        except MigrationsError as e:
            _fail(e)

    echo_quiet(str(version), verbosity)
