"""
User persistence — lookups, creation and soft deletion.

``AuthService`` depends on the ``UserStore`` protocol so tests can swap in
an in-memory store; ``SqlUserStore`` is the PostgreSQL implementation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Any failure talking to the user store."""


class EmailAlreadyRegisteredError(StoreError):
    """The unique index on ``users.email`` rejected an insert."""

    def __init__(self, email: str):
        super().__init__(f"A user with email {email!r} already exists")
        self.email = email


class UserStore(Protocol):
    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    async def get_by_id(self, user_id: int) -> Optional[User]:
        ...

    async def create(self, full_name: str, email: str, password_hash: str) -> User:
        ...

    async def soft_delete(self, user_id: int) -> bool:
        ...


class SqlUserStore:
    """``UserStore`` backed by an ``AsyncSession`` (one per request)."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        try:
            result = await self._session.execute(
                select(User).where(User.email == email, User.deleted_at.is_(None))
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"User lookup failed: {exc}") from exc
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[User]:
        try:
            result = await self._session.execute(
                select(User).where(User.id == user_id, User.deleted_at.is_(None))
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"User lookup failed: {exc}") from exc
        return result.scalar_one_or_none()

    async def create(self, full_name: str, email: str, password_hash: str) -> User:
        """
        Insert a user row and flush so the unique index is checked now.

        Raises ``EmailAlreadyRegisteredError`` when a concurrent registration
        won the race past the existence check.
        """
        user = User(full_name=full_name, email=email, password_hash=password_hash)
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise EmailAlreadyRegisteredError(email) from exc
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StoreError(f"User insert failed: {exc}") from exc
        return user

    async def soft_delete(self, user_id: int) -> bool:
        """Mark a user deleted. Returns ``False`` if no live user matched."""
        user = await self.get_by_id(user_id)
        if user is None:
            return False
        user.deleted_at = datetime.now(timezone.utc)
        try:
            await self._session.flush()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StoreError(f"User delete failed: {exc}") from exc
        logger.info("Soft-deleted user %s", user_id)
        return True
