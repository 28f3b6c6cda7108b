"""Configuration management commands for fnstore CLI."""
import sys

import click
import yaml

from fnstore.config import get_config_path, get_value, load_config, save_config, set_value

# Local CLI imports
from .common import echo_normal, echo_quiet


@click.group()
def config_group():
    """Configuration management commands."""
    pass


@config_group.command('set')
@click.argument('key')
@click.argument('value')
@click.pass_context
def config_set(ctx, key: str, value: str) -> None:
    """Set a configuration value.

    Examples:
        fnstore config set database.path /var/lib/fnstore/fn.sqlite
        fnstore config set logging.level DEBUG
    """
    verbosity = ctx.obj.get('verbosity', 1)
    config_path = get_config_path(ctx.obj.get('config_path'))

    try:
        config_data = load_config(config_path)
        set_value(config_data, key, value)
        save_config(config_data, config_path)
    except (OSError, ValueError) as e:
        echo_quiet(click.style(f"Error: Failed to set config: {e}", fg="red"), verbosity)
        sys.exit(1)

    echo_normal(click.style(f"✓ Set {key} = {value}", fg="green"), verbosity)


@config_group.command('get')
@click.argument('key')
@click.pass_context
def config_get(ctx, key: str) -> None:
    """Get a configuration value.

    Examples:
        fnstore config get database.driver
    """
    verbosity = ctx.obj.get('verbosity', 1)
    try:
        value = get_value(ctx.obj['config'], key)
    except KeyError:
        echo_quiet(click.style(f"Key '{key}' not found", fg="yellow"), verbosity)
        sys.exit(1)

    echo_quiet(value, verbosity)


@config_group.command('show')
@click.pass_context
def config_show(ctx) -> None:
    """Display the effective configuration."""
    verbosity = ctx.obj.get('verbosity', 1)
    echo_normal(click.style("Current configuration:", fg="cyan", bold=True), verbosity)
    echo_quiet(yaml.dump(ctx.obj['config'], default_flow_style=False).rstrip(), verbosity)
