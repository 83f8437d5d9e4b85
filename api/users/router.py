"""
Users API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from . import dependencies, schemas, service
from .repository import UserRepository

router = APIRouter()


@router.post(
    "/users/register",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.UserResponse,
)
async def register(
    request: schemas.UserWriteRequest,
    response: Response,
    repo: UserRepository = Depends(dependencies.get_user_repository),
) -> schemas.UserResponse:
    user = await service.register(repo, request)
    response.headers["Location"] = f"/users/{user.id}"
    return user


@router.get("/users/{user_id}", response_model=schemas.UserResponse)
async def get_user(
    user_id: str,
    repo: UserRepository = Depends(dependencies.get_user_repository),
) -> schemas.UserResponse:
    return await service.get_user(repo, user_id)


@router.get("/users", response_model=list[schemas.UserResponse])
async def list_users(
    repo: UserRepository = Depends(dependencies.get_user_repository),
) -> list[schemas.UserResponse]:
    return await service.list_users(repo)


@router.put("/users/{user_id}", response_model=schemas.UpdatedResponse)
async def update_user(
    user_id: str,
    request: schemas.UserWriteRequest,
    repo: UserRepository = Depends(dependencies.get_user_repository),
) -> schemas.UpdatedResponse:
    return await service.update_user(repo, user_id, request)


@router.delete("/users/{user_id}", response_model=schemas.DeletedResponse)
async def delete_user(
    user_id: str,
    repo: UserRepository = Depends(dependencies.get_user_repository),
) -> schemas.DeletedResponse:
    return await service.delete_user(repo, user_id)
