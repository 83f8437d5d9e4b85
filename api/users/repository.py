"""
Users persistence (raw SQL).

Each method is a single statement, so each runs atomically on one pooled
connection. Email uniqueness is enforced by the table's UNIQUE constraint.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

import asyncpg

from core.db import Database
from core.errors import ConflictError

_USER_COLUMNS = "id, email, name, created_at"


class UserRepository:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def insert_user(self, *, user_id: UUID, email: str, name: str, created_at: datetime) -> dict:
        try:
            row = await self._db.fetch_one(
                f"""
                INSERT INTO users (id, email, name, created_at)
                VALUES ($1, $2, $3, $4)
                RETURNING {_USER_COLUMNS}
                """,
                user_id,
                email,
                name,
                created_at,
            )
        except asyncpg.UniqueViolationError as exc:
            raise ConflictError("Email is already registered.") from exc
        if row is None:
            raise RuntimeError("Failed to create user.")
        return row

    async def get_user(self, user_id: UUID) -> dict | None:
        return await self._db.fetch_one(
            f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE id = $1
            """,
            user_id,
        )

    async def list_users(self) -> list[dict]:
        return await self._db.fetch_all(
            f"""
            SELECT {_USER_COLUMNS}
            FROM users
            ORDER BY created_at DESC
            """
        )

    async def update_user(self, user_id: UUID, *, email: str, name: str) -> bool:
        """
        Returns False when no user has this id.
        """
        try:
            row = await self._db.fetch_one(
                """
                UPDATE users
                SET email = $2,
                    name = $3
                WHERE id = $1
                RETURNING id
                """,
                user_id,
                email,
                name,
            )
        except asyncpg.UniqueViolationError as exc:
            raise ConflictError("Email is already registered.") from exc
        return row is not None

    async def delete_user(self, user_id: UUID) -> bool:
        row = await self._db.fetch_one(
            """
            DELETE FROM users
            WHERE id = $1
            RETURNING id
            """,
            user_id,
        )
        return row is not None
