"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from auth.exceptions import UnauthorizedError
from auth.models import UserOut
from auth.service import AuthService
from auth.tokens import TokenManager, get_token_manager
from database.session import get_db_session
from database.user_store import SqlUserStore, UserStore


async def db_session(session: AsyncSession = Depends(get_db_session)) -> AsyncGenerator[AsyncSession, None]:
    """Re-export so routes import from a single place."""
    yield session


def get_user_store(session: AsyncSession = Depends(db_session)) -> UserStore:
    return SqlUserStore(session)


def get_auth_service(
    store: UserStore = Depends(get_user_store),
    tokens: TokenManager = Depends(get_token_manager),
) -> AuthService:
    return AuthService(store, tokens)


async def get_current_user(
    authorization: str = Header("", alias="Authorization"),
    service: AuthService = Depends(get_auth_service),
) -> UserOut:
    """
    Extract and verify the Bearer token from the Authorization header.
    Returns the authenticated user.
    """
    if not authorization.startswith("Bearer "):
        raise UnauthorizedError("Missing Bearer token")
    return await service.current_user(authorization[7:])
