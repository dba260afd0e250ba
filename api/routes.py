"""
HTTP routes — liveness, health, register, login and current user.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from api.dependencies import get_auth_service, get_current_user
from auth.exceptions import InvalidInputError
from auth.models import AuthResponse, UserOut
from auth.service import AuthService
from config.settings import config

logger = logging.getLogger(__name__)

router = APIRouter()


async def _json_body(request: Request) -> Any:
    """Decode the request body, rejecting malformed JSON before any work runs."""
    body = await request.body()
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.debug("Rejected malformed JSON on %s", request.url.path)
        raise InvalidInputError("Invalid JSON") from exc


@router.get("/", response_class=PlainTextResponse, tags=["health"])
async def home() -> str:
    return f"Server is running on port {config.port}"


@router.get("/health", tags=["health"])
async def health() -> Dict[str, str]:
    """Static liveness payload; does not touch the database."""
    return {"status": "healthy", "message": "Server is running"}


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["auth"],
)
async def register(
    payload: Any = Depends(_json_body),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user."""
    return await service.register(payload)


@router.post("/login", response_model=AuthResponse, tags=["auth"])
async def login(
    payload: Any = Depends(_json_body),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login with email + password."""
    return await service.login(payload)


@router.get("/me", response_model=UserOut, tags=["auth"])
async def me(user: UserOut = Depends(get_current_user)) -> UserOut:
    return user
