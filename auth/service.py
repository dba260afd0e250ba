"""
Registration and login flows.

``AuthService`` owns the credential rules and talks to storage only through
the ``UserStore`` protocol, so routes inject a SQL-backed store and tests
inject an in-memory one.
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from auth.exceptions import (
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    InvalidInputError,
    UnauthorizedError,
)
from auth.models import AuthResponse, LoginRequest, RegisterRequest, UserOut
from auth.password import PasswordHashError, hash_password, verify_password
from auth.tokens import TokenConfigurationError, TokenError, TokenManager
from database.user_store import EmailAlreadyRegisteredError, StoreError, UserStore

logger = logging.getLogger(__name__)


def _validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    missing = [str(err["loc"][0]) for err in errors if err["type"] == "missing" and err["loc"]]
    if missing:
        return "Missing required fields: " + ", ".join(missing)
    first = errors[0]
    field = ".".join(str(part) for part in first["loc"]) or "body"
    return f"Invalid {field}: {first['msg']}"


@lru_cache
def _dummy_hash(rounds: Optional[int]) -> str:
    """Hash compared against when the email is unknown, at the same cost as real ones."""
    return hash_password("unused-placeholder-password", rounds)


def _parse(model: type[BaseModel], payload: Any) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidInputError(_validation_message(exc)) from exc


class AuthService:
    def __init__(
        self,
        store: UserStore,
        tokens: TokenManager,
        hash_rounds: Optional[int] = None,
    ):
        self._store = store
        self._tokens = tokens
        self._hash_rounds = hash_rounds

    def _issue(self, user_id: int) -> str:
        try:
            return self._tokens.issue(user_id)
        except TokenError as exc:
            logger.error("Token generation failed for user %s: %s", user_id, exc)
            raise InternalError("Failed to generate token") from exc

    async def register(self, payload: Any) -> AuthResponse:
        """
        Create an account and return a token for it.

        The existence check runs before hashing; the store's unique index
        still decides races between concurrent registrations.
        """
        req: RegisterRequest = _parse(RegisterRequest, payload)
        email = str(req.email)

        try:
            existing = await self._store.get_by_email(email)
        except StoreError as exc:
            logger.error("User lookup failed during registration: %s", exc)
            raise InternalError("Failed to create user") from exc
        if existing is not None:
            logger.info("Registration rejected, email already registered: %s", email)
            raise ConflictError()

        try:
            password_hash = await asyncio.to_thread(
                hash_password, req.password, self._hash_rounds
            )
        except PasswordHashError as exc:
            logger.error("Password hashing failed: %s", exc)
            raise InternalError("Failed to hash password") from exc

        try:
            user = await self._store.create(req.full_name, email, password_hash)
        except EmailAlreadyRegisteredError as exc:
            logger.info("Concurrent registration lost the race for %s", email)
            raise ConflictError() from exc
        except StoreError as exc:
            logger.error("User insert failed: %s", exc)
            raise InternalError("Failed to create user") from exc

        token = self._issue(user.id)
        logger.info("Registered user %s (%s)", user.id, email)
        return AuthResponse(
            token=token,
            user=UserOut.model_validate(user),
            message="User registered successfully",
        )

    async def login(self, payload: Any) -> AuthResponse:
        """Check credentials; unknown email and wrong password fail identically."""
        req: LoginRequest = _parse(LoginRequest, payload)
        email = str(req.email)

        try:
            user = await self._store.get_by_email(email)
        except StoreError as exc:
            logger.error("User lookup failed during login: %s", exc)
            raise InternalError("Failed to log in") from exc

        # Unknown emails still run one bcrypt check, same as a wrong password.
        if user is None:
            stored_hash = await asyncio.to_thread(_dummy_hash, self._hash_rounds)
        else:
            stored_hash = user.password_hash
        matched = await asyncio.to_thread(verify_password, req.password, stored_hash)
        if user is None or not matched:
            logger.info("Login failed for %s", email)
            raise InvalidCredentialsError()

        token = self._issue(user.id)
        logger.info("Login: user %s (%s)", user.id, email)
        return AuthResponse(
            token=token,
            user=UserOut.model_validate(user),
            message="User logged in successfully",
        )

    async def current_user(self, token: str) -> UserOut:
        """Resolve a bearer token to the live user it was issued for."""
        try:
            user_id = self._tokens.verify(token)
        except TokenConfigurationError as exc:
            logger.error("Token verification unavailable: %s", exc)
            raise InternalError("Failed to verify token") from exc
        except TokenError as exc:
            raise UnauthorizedError(f"Invalid or expired token: {exc}") from exc

        try:
            user = await self._store.get_by_id(user_id)
        except StoreError as exc:
            logger.error("User lookup failed for token subject %s: %s", user_id, exc)
            raise InternalError("Failed to load user") from exc
        if user is None:
            raise UnauthorizedError("User no longer exists")
        return UserOut.model_validate(user)
