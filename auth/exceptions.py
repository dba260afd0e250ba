"""
Authentication service exceptions.

Each error carries the HTTP status it maps to; the exception handler in
``main.py`` renders them as ``{"error": code, "message": message}``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import status


class AuthServiceError(Exception):
    """Base exception for all request-level auth failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "AUTH_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class InvalidInputError(AuthServiceError):
    """Missing or malformed request fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_INPUT"


class ConflictError(AuthServiceError):
    """Email is already registered."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"

    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class InvalidCredentialsError(AuthServiceError):
    """
    Login failed.

    The message is identical for an unknown email and a wrong password.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class UnauthorizedError(AuthServiceError):
    """Bearer token missing, invalid or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class InternalError(AuthServiceError):
    """Hashing, signing or store failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL_ERROR"
