"""
Users API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class UserWriteRequest(BaseModel):
    # Presence is checked by the service so that missing fields map to 400.
    email: Any = None
    name: Any = None


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str
    created_at: datetime


class UpdatedResponse(BaseModel):
    updated: bool = True


class DeletedResponse(BaseModel):
    deleted: bool = True
