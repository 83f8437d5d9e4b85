"""
Startup provisioning: make sure the target database and the `users` table
exist before the API accepts requests.

Both steps are safe to run on every start. Failures are not caught here;
they propagate out of the app lifespan and stop the process.
"""

from __future__ import annotations

import logging
import os
from urllib.parse import unquote, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_DATABASE = "postgres"

USERS_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS users (
    id UUID PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL
)
"""


def admin_database_name() -> str:
    return os.environ.get("DATABASE_ADMIN_NAME", DEFAULT_ADMIN_DATABASE).strip() or DEFAULT_ADMIN_DATABASE


def target_database_name(dsn: str) -> str:
    name = unquote(urlsplit(dsn).path.lstrip("/"))
    if not name:
        raise RuntimeError("DATABASE_URL does not name a database.")
    return name


def admin_database_url(dsn: str, admin_name: str | None = None) -> str:
    """
    Same server and credentials as `dsn`, pointed at the administrative database.
    """
    parts = urlsplit(dsn)
    admin_name = admin_name or admin_database_name()
    return urlunsplit((parts.scheme, parts.netloc, "/" + admin_name, parts.query, parts.fragment))


def _quote_identifier(name: str) -> str:
    # Database names cannot be bound as parameters.
    return '"' + name.replace('"', '""') + '"'


async def ensure_database_exists(dsn: str, *, admin_name: str | None = None) -> bool:
    """
    Create the database named in `dsn` if the server does not have it yet.

    Returns True when the database was created by this call.
    """
    db_name = target_database_name(dsn)
    conn = await asyncpg.connect(dsn=admin_database_url(dsn, admin_name))
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
        if exists:
            logger.debug("database_exists name=%s", db_name)
            return False

        await conn.execute(f"CREATE DATABASE {_quote_identifier(db_name)}")
        logger.info("database_created name=%s", db_name)
        return True
    finally:
        await conn.close()


async def ensure_schema(dsn: str) -> None:
    conn = await asyncpg.connect(dsn=dsn)
    try:
        await conn.execute(USERS_TABLE_DDL)
    finally:
        await conn.close()
    logger.info("schema_ensured table=users")


async def provision(dsn: str, *, admin_name: str | None = None) -> None:
    await ensure_database_exists(dsn, admin_name=admin_name)
    await ensure_schema(dsn)
