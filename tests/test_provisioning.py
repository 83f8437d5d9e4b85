"""Tests for startup provisioning against a fake Postgres server."""

from __future__ import annotations

import pytest

from core import provisioning


class FakeServer:
    def __init__(self, databases: set[str] | None = None) -> None:
        self.databases = set(databases or {"postgres"})
        self.tables: dict[str, set[str]] = {}
        self.connections: list[FakeConnection] = []
        self.statements: list[str] = []

    async def connect(self, dsn: str) -> "FakeConnection":
        conn = FakeConnection(self, dsn.rsplit("/", 1)[-1])
        self.connections.append(conn)
        return conn


class FakeConnection:
    def __init__(self, server: FakeServer, database: str) -> None:
        self.server = server
        self.database = database
        self.closed = False

    async def fetchval(self, sql: str, *args):
        assert "pg_database" in sql
        return 1 if args[0] in self.server.databases else None

    async def execute(self, sql: str, *args) -> str:
        self.server.statements.append(sql)
        if sql.startswith("CREATE DATABASE"):
            name = sql[len("CREATE DATABASE "):].strip()[1:-1].replace('""', '"')
            assert name not in self.server.databases
            self.server.databases.add(name)
            return "CREATE DATABASE"
        assert "CREATE TABLE IF NOT EXISTS users" in sql
        self.server.tables.setdefault(self.database, set()).add("users")
        return "CREATE TABLE"

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def server(monkeypatch) -> FakeServer:
    fake = FakeServer()
    monkeypatch.setattr(provisioning.asyncpg, "connect", fake.connect)
    return fake


DSN = "postgresql://app:secret@db:5432/users_db"


def test_admin_database_url_swaps_only_the_database() -> None:
    assert provisioning.admin_database_url(DSN, "postgres") == "postgresql://app:secret@db:5432/postgres"
    assert (
        provisioning.admin_database_url("postgresql://u@h/app?application_name=x", "template1")
        == "postgresql://u@h/template1?application_name=x"
    )


def test_admin_database_name_from_env(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_ADMIN_NAME", raising=False)
    assert provisioning.admin_database_name() == "postgres"
    monkeypatch.setenv("DATABASE_ADMIN_NAME", "maintenance")
    assert provisioning.admin_database_name() == "maintenance"


def test_target_database_name_required() -> None:
    assert provisioning.target_database_name(DSN) == "users_db"
    with pytest.raises(RuntimeError):
        provisioning.target_database_name("postgresql://app:secret@db:5432/")


@pytest.mark.asyncio
async def test_ensure_database_creates_missing_database(server: FakeServer, caplog) -> None:
    with caplog.at_level("INFO", logger="core.provisioning"):
        created = await provisioning.ensure_database_exists(DSN, admin_name="postgres")

    assert created is True
    assert "users_db" in server.databases
    assert server.connections[0].database == "postgres"
    assert all(conn.closed for conn in server.connections)
    assert "database_created name=users_db" in caplog.text


@pytest.mark.asyncio
async def test_ensure_database_quotes_name(server: FakeServer) -> None:
    await provisioning.ensure_database_exists('postgresql://u@h/we"ird', admin_name="postgres")
    assert 'CREATE DATABASE "we""ird"' in server.statements
    assert 'we"ird' in server.databases


@pytest.mark.asyncio
async def test_provision_twice_is_idempotent(server: FakeServer) -> None:
    await provisioning.provision(DSN, admin_name="postgres")
    await provisioning.provision(DSN, admin_name="postgres")

    creates = [s for s in server.statements if s.startswith("CREATE DATABASE")]
    assert creates == ['CREATE DATABASE "users_db"']
    assert server.tables == {"users_db": {"users"}}
    assert all("IF NOT EXISTS" in s for s in server.statements if "TABLE" in s)
    assert all(conn.closed for conn in server.connections)


@pytest.mark.asyncio
async def test_failures_propagate_and_close_connection(server: FakeServer, monkeypatch) -> None:
    async def broken_fetchval(self, sql: str, *args):
        raise OSError("server went away")

    monkeypatch.setattr(FakeConnection, "fetchval", broken_fetchval)

    with pytest.raises(OSError):
        await provisioning.provision(DSN, admin_name="postgres")
    assert server.connections[0].closed
    assert server.tables == {}


@pytest.mark.asyncio
async def test_connect_failure_is_fatal(monkeypatch) -> None:
    async def refuse(dsn: str):
        raise ConnectionRefusedError("no server")

    monkeypatch.setattr(provisioning.asyncpg, "connect", refuse)
    with pytest.raises(ConnectionRefusedError):
        await provisioning.provision(DSN)
