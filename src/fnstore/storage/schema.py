"""
Baseline datastore schema.

This module handles:
- Creation of the routes, apps, calls and logs tables
- Nothing else: columns added later are owned by migrations

Every statement is CREATE TABLE IF NOT EXISTS, so this runs on every start
and on databases created by other means.
"""

import logging
from typing import Tuple

from ..migrations.dialect import Session
from ..migrations.errors import ConnectivityError

logger = logging.getLogger(__name__)

BASELINE_TABLES: Tuple[str, ...] = (
    """CREATE TABLE IF NOT EXISTS routes (
        app_name varchar(256) NOT NULL,
        path varchar(256) NOT NULL,
        image varchar(256) NOT NULL,
        format varchar(16) NOT NULL,
        memory int NOT NULL,
        timeout int NOT NULL,
        idle_timeout int NOT NULL,
        type varchar(16) NOT NULL,
        headers text NOT NULL,
        config text NOT NULL,
        PRIMARY KEY (app_name, path)
    )""",

    """CREATE TABLE IF NOT EXISTS apps (
        name varchar(256) NOT NULL PRIMARY KEY,
        config text NOT NULL
    )""",

    """CREATE TABLE IF NOT EXISTS calls (
        created_at varchar(256) NOT NULL,
        started_at varchar(256) NOT NULL,
        completed_at varchar(256) NOT NULL,
        status varchar(256) NOT NULL,
        id varchar(256) NOT NULL,
        app_name varchar(256) NOT NULL,
        path varchar(256) NOT NULL,
        PRIMARY KEY (id)
    )""",

    """CREATE TABLE IF NOT EXISTS logs (
        id varchar(256) NOT NULL PRIMARY KEY,
        app_name varchar(256) NOT NULL,
        log text NOT NULL
    )""",
)


def init_database(db: Session) -> None:
    """
    Create the baseline tables if they are absent.

    Args:
        db: Session bound to the live connection

    Raises:
        ConnectivityError: If any statement fails
    """
    try:
        for statement in BASELINE_TABLES:
            db.execute(statement).close()
        db.commit()
    except Exception as e:
        try:
            db.rollback()
        except Exception as rollback_error:
            logger.warning(f"Rollback failed: {rollback_error}")
        raise ConnectivityError(f"failed to create baseline tables: {e}") from e
