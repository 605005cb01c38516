"""Additive, versioned schema provisioning for the ``users`` table.

Migrations only ever add structure. Each step is applied once, in its own
transaction, and recorded in ``schema_migrations``; rerunning is a no-op.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from sqlalchemy import create_engine, inspect, select, text
from sqlalchemy.engine import Connection, Engine, make_url

from user_registration.database import mask_db_url
from user_registration.models.schema_migration import SchemaMigration
from user_registration.models.user import User


logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_$]+$")


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    apply: Callable[[Connection], None]


def _create_users_table(conn: Connection) -> None:
    User.__table__.create(bind=conn, checkfirst=True)


def _add_column_if_missing(conn: Connection, table: str, column: str, ddl_type: str) -> None:
    existing = {col["name"] for col in inspect(conn).get_columns(table)}
    if column in existing:
        logger.info("%s.%s column already exists", table, column)
        return
    # Identifiers are module constants, never request data.
    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))
    logger.info("Added %s column to %s table", column, table)


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "create_users_table", _create_users_table),
    Migration(
        2,
        "add_users_profile_image",
        lambda conn: _add_column_if_missing(conn, "users", "profile_image", "VARCHAR(255)"),
    ),
    Migration(
        3,
        "add_users_cv_filename",
        lambda conn: _add_column_if_missing(conn, "users", "cv_filename", "VARCHAR(255)"),
    ),
)


def ensure_database(db_url: str) -> None:
    """Create the target MySQL database when it does not exist yet.

    SQLite creates its file on first connect, so other backends are left alone.
    """
    url = make_url(db_url)
    if url.get_backend_name() != "mysql" or not url.database:
        return

    name = url.database
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Refusing to create database with unexpected name: {name!r}")

    server_engine = create_engine(url.set(database=None), pool_pre_ping=True, future=True)
    try:
        with server_engine.begin() as conn:
            conn.execute(text(f"CREATE DATABASE IF NOT EXISTS `{name}`"))
        logger.info("Database %s ready on %s", name, mask_db_url(db_url))
    finally:
        server_engine.dispose()


def applied_versions(engine: Engine) -> set[int]:
    """Read-only: a database without the ledger table has applied nothing."""
    if not inspect(engine).has_table(SchemaMigration.__tablename__):
        return set()
    with engine.connect() as conn:
        return set(conn.execute(select(SchemaMigration.version)).scalars())


def pending_migrations(engine: Engine) -> list[Migration]:
    done = applied_versions(engine)
    return [m for m in MIGRATIONS if m.version not in done]


def apply_migrations(engine: Engine) -> list[int]:
    """Apply every pending migration in version order and return the versions applied."""
    with engine.begin() as conn:
        SchemaMigration.__table__.create(bind=conn, checkfirst=True)

    applied: list[int] = []
    for migration in pending_migrations(engine):
        with engine.begin() as conn:
            migration.apply(conn)
            conn.execute(
                SchemaMigration.__table__.insert().values(version=migration.version, name=migration.name)
            )
        logger.info("Applied migration %03d %s", migration.version, migration.name)
        applied.append(migration.version)

    if not applied:
        logger.info("Schema up to date")
    return applied


def provision_schema(engine: Engine, db_url: str) -> list[int]:
    ensure_database(db_url)
    return apply_migrations(engine)
