"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.  The salt and cost are embedded
in the hash string, so nothing else needs to be stored.
"""

from __future__ import annotations

import bcrypt

from config.settings import config

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class PasswordHashError(Exception):
    """Raised when a password cannot be hashed."""


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise PasswordHashError(
            f"Password exceeds {MAX_PASSWORD_BYTES} bytes"
        )
    try:
        salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
        return bcrypt.hashpw(encoded, salt).decode("ascii")
    except ValueError as exc:
        raise PasswordHashError(str(exc)) from exc


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except (ValueError, TypeError, UnicodeEncodeError):
        return False
