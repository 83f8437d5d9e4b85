"""
Dependencies for the users routes.
"""

from __future__ import annotations

from fastapi import Request

from core.db import Database

from .repository import UserRepository


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_user_repository(request: Request) -> UserRepository:
    return UserRepository(get_database(request))
