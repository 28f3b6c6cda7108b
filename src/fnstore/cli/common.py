"""Shared utilities for fnstore CLI commands."""
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict

import click

# Verbosity levels
VERBOSITY_QUIET = 0
VERBOSITY_NORMAL = 1
VERBOSITY_VERBOSE = 2

# Exit codes
EXIT_ERROR = 1
EXIT_DIRTY = 2


def setup_logging(level: str, verbosity: int) -> None:
    """Configure root logging from the config level and CLI verbosity.

    --verbose forces DEBUG, --quiet raises the threshold to ERROR.
    """
    if verbosity >= VERBOSITY_VERBOSE:
        log_level = logging.DEBUG
    elif verbosity <= VERBOSITY_QUIET:
        log_level = logging.ERROR
    else:
        log_level = getattr(logging, str(level).upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(log_level)


def should_print(verbosity: int, message_level: int) -> bool:
    """Determine if a message should be printed based on verbosity settings."""
    return verbosity >= message_level


def echo_verbose(message: str, verbosity: int) -> None:
    """Print a message only in verbose mode."""
    if should_print(verbosity, VERBOSITY_VERBOSE):
        click.echo(message, err=False)


def echo_normal(message: str, verbosity: int) -> None:
    """Print a message in normal and verbose modes."""
    if should_print(verbosity, VERBOSITY_NORMAL):
        click.echo(message, err=False)


def echo_quiet(message: str, verbosity: int) -> None:
    """Print a critical message that should always be shown (even in quiet mode)."""
    click.echo(message, err=False)


def echo_error(message: str) -> None:
    """Print an error to stderr."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)


def open_connection(config: Dict[str, Any]) -> sqlite3.Connection:
    """Open the configured database.

    Only the sqlite3 driver can be opened from the CLI; other dialects are
    driven from code with a caller-supplied connection.

    Raises:
        click.UsageError: If the configured driver is not sqlite3
    """
    driver = config["database"]["driver"]
    if driver not in ("sqlite3", "sqlite"):
        raise click.UsageError(
            f"database.driver '{driver}' cannot be opened from the CLI (sqlite3 only)"
        )
    db_path = Path(config["database"]["path"]).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(db_path)
