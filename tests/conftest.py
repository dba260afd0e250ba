"""
Shared fixtures: an in-memory user store and a wired-up test client.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_auth_service
from auth.service import AuthService
from auth.tokens import TokenManager
from database.models import User
from database.user_store import EmailAlreadyRegisteredError

TEST_JWT_SECRET = "test-secret-key-for-testing-only"

# Cheapest bcrypt cost; keeps the suite fast.
TEST_HASH_ROUNDS = 4


class InMemoryUserStore:
    """``UserStore`` substitute with the same unique-email rule as the table."""

    def __init__(self) -> None:
        self.users: Dict[int, User] = {}
        self._next_id = 1

    async def get_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email and user.deleted_at is None:
                return user
        return None

    async def get_by_id(self, user_id: int) -> Optional[User]:
        user = self.users.get(user_id)
        if user is None or user.deleted_at is not None:
            return None
        return user

    async def create(self, full_name: str, email: str, password_hash: str) -> User:
        if any(u.email == email for u in self.users.values()):
            raise EmailAlreadyRegisteredError(email)
        now = datetime.now(timezone.utc)
        user = User(
            id=self._next_id,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        self._next_id += 1
        return user

    async def soft_delete(self, user_id: int) -> bool:
        user = await self.get_by_id(user_id)
        if user is None:
            return False
        user.deleted_at = datetime.now(timezone.utc)
        return True


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def tokens() -> TokenManager:
    return TokenManager(TEST_JWT_SECRET)


@pytest.fixture
def service(store: InMemoryUserStore, tokens: TokenManager) -> AuthService:
    return AuthService(store, tokens, hash_rounds=TEST_HASH_ROUNDS)


@pytest.fixture
def client(service: AuthService) -> TestClient:
    """Client without the startup hook, so no database or env is needed."""
    from main import create_app

    app = create_app()
    app.dependency_overrides[get_auth_service] = lambda: service
    return TestClient(app)


@pytest.fixture
def registration() -> dict:
    return {
        "full_name": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "analytical",
    }
