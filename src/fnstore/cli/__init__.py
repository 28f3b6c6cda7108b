"""fnstore CLI - Datastore schema management

Command groups:
- migrate.py: migrate up, down-all, status, version
- config.py: config set, get, show
- common.py: shared utilities
"""
import click

from fnstore import __version__
from fnstore.config import load_config

# Local imports
from .common import (
    VERBOSITY_NORMAL,
    VERBOSITY_QUIET,
    VERBOSITY_VERBOSE,
    setup_logging,
)
from .config import config_group
from .migrate import migrate_group


@click.group()
@click.version_option(version=__version__, prog_name="fnstore")
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              envvar='FNSTORE_CONFIG',
              help='Config file (default: ~/.fnstore/config.yaml)')
@click.option('--verbose', '-v', is_flag=True, default=False,
              help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, default=False,
              help='Suppress non-essential output')
@click.pass_context
def cli(ctx, config_path, verbose, quiet):
    """fnstore - Datastore schema management

    \b
    Key Commands:
        migrate up        Create tables and apply outstanding migrations
        migrate down-all  Reverse all migrations to baseline
        migrate status    List migrations and whether they are applied
        migrate version   Print the recorded version
        config            Configuration management
    """
    ctx.ensure_object(dict)

    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")

    if quiet:
        ctx.obj['verbosity'] = VERBOSITY_QUIET
    elif verbose:
        ctx.obj['verbosity'] = VERBOSITY_VERBOSE
    else:
        ctx.obj['verbosity'] = VERBOSITY_NORMAL

    ctx.obj['config_path'] = config_path
    try:
        ctx.obj['config'] = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))

    setup_logging(ctx.obj['config']['logging']['level'], ctx.obj['verbosity'])


cli.add_command(migrate_group, name='migrate')
cli.add_command(config_group, name='config')


def main() -> None:
    """Entry point for the fnstore CLI."""
    cli()


if __name__ == "__main__":
    main()
