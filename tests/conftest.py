from __future__ import annotations

from datetime import datetime
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from core.errors import ConflictError
from main import create_app
from users import dependencies


class InMemoryUserRepository:
    """Stands in for `UserRepository` with the same unique-email rule."""

    def __init__(self) -> None:
        self.rows: dict[UUID, dict] = {}

    def _email_taken(self, email: str, *, exclude: UUID | None = None) -> bool:
        return any(row["email"] == email and row_id != exclude for row_id, row in self.rows.items())

    async def insert_user(self, *, user_id: UUID, email: str, name: str, created_at: datetime) -> dict:
        if self._email_taken(email):
            raise ConflictError("Email is already registered.")
        row = {"id": user_id, "email": email, "name": name, "created_at": created_at}
        self.rows[user_id] = row
        return dict(row)

    async def get_user(self, user_id: UUID) -> dict | None:
        row = self.rows.get(user_id)
        return dict(row) if row is not None else None

    async def list_users(self) -> list[dict]:
        return [dict(row) for row in sorted(self.rows.values(), key=lambda r: r["created_at"], reverse=True)]

    async def update_user(self, user_id: UUID, *, email: str, name: str) -> bool:
        if user_id not in self.rows:
            return False
        if self._email_taken(email, exclude=user_id):
            raise ConflictError("Email is already registered.")
        self.rows[user_id].update(email=email, name=name)
        return True

    async def delete_user(self, user_id: UUID) -> bool:
        return self.rows.pop(user_id, None) is not None


@pytest.fixture()
def repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def client(repo: InMemoryUserRepository):
    app = create_app(database=object())
    app.dependency_overrides[dependencies.get_user_repository] = lambda: repo
    with TestClient(app) as test_client:
        yield test_client
