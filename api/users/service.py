"""
Users business logic: input validation, id/timestamp assignment and
not-found semantics. All SQL lives in `repository.py`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from core.errors import NotFoundError, ValidationError

from . import schemas
from .repository import UserRepository


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=user_row["id"],
        email=str(user_row["email"]),
        name=str(user_row["name"]),
        created_at=user_row["created_at"],
    )


def parse_user_id(raw_id: str) -> UUID:
    try:
        return UUID(str(raw_id).strip())
    except ValueError as exc:
        raise ValidationError("invalid user id") from exc


def _clean_fields(payload: schemas.UserWriteRequest) -> tuple[str, str]:
    email = payload.email.strip() if isinstance(payload.email, str) else ""
    name = payload.name.strip() if isinstance(payload.name, str) else ""
    if not email or not name:
        raise ValidationError("email and name are required")
    return email, name


async def register(repo: UserRepository, payload: schemas.UserWriteRequest) -> schemas.UserResponse:
    email, name = _clean_fields(payload)
    user_row = await repo.insert_user(
        user_id=uuid4(),
        email=email,
        name=name,
        created_at=_utc_now(),
    )
    return _to_user_response(user_row)


async def get_user(repo: UserRepository, raw_id: str) -> schemas.UserResponse:
    user_row = await repo.get_user(parse_user_id(raw_id))
    if user_row is None:
        raise NotFoundError("User not found.")
    return _to_user_response(user_row)


async def list_users(repo: UserRepository) -> list[schemas.UserResponse]:
    rows = await repo.list_users()
    return [_to_user_response(row) for row in rows]


async def update_user(
    repo: UserRepository,
    raw_id: str,
    payload: schemas.UserWriteRequest,
) -> schemas.UpdatedResponse:
    user_id = parse_user_id(raw_id)
    email, name = _clean_fields(payload)
    if not await repo.update_user(user_id, email=email, name=name):
        raise NotFoundError("User not found.")
    return schemas.UpdatedResponse()


async def delete_user(repo: UserRepository, raw_id: str) -> schemas.DeletedResponse:
    if not await repo.delete_user(parse_user_id(raw_id)):
        raise NotFoundError("User not found.")
    return schemas.DeletedResponse()
