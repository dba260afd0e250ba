"""
Signed session tokens.

Tokens are HS256 JWTs carrying ``sub`` (user id), ``iat`` and ``exp``.
Secret key is loaded from ``config.jwt_secret`` (env var: ``JWT_SECRET``).
Tokens are stateless: there is no revocation list, so a leaked token stays
valid until it expires.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt

from config.settings import config

ALGORITHM = "HS256"


class TokenError(Exception):
    """Base class for token failures."""


class TokenConfigurationError(TokenError):
    """No signing secret is configured."""


class InvalidSignatureError(TokenError):
    """Signature does not match, or the token uses an unexpected algorithm."""


class ExpiredTokenError(TokenError):
    """Current time is at or past ``exp``."""


class MalformedTokenError(TokenError):
    """Token could not be parsed or is missing required claims."""


class TokenManager:
    """Issues and verifies tokens with a single symmetric secret."""

    def __init__(self, secret: str, expiry_seconds: int = 86400):
        self._secret = secret
        self._expiry = timedelta(seconds=expiry_seconds)

    def _require_secret(self) -> str:
        if not self._secret:
            raise TokenConfigurationError("JWT_SECRET is not configured")
        return self._secret

    def issue(self, user_id: int, now: Optional[datetime] = None) -> str:
        """Create a signed token for ``user_id`` valid for the configured window."""
        secret = self._require_secret()
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self._expiry,
        }
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> int:
        """
        Verify ``token`` and return the user id it was issued for.

        Only ``HS256`` is accepted, so ``none``-algorithm or otherwise
        re-signed tokens fail as ``InvalidSignatureError``.
        """
        secret = self._require_secret()
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError("Token has expired") from exc
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
            raise InvalidSignatureError(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError(str(exc)) from exc

        try:
            return int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError("Token subject is not a user id") from exc


@lru_cache
def get_token_manager() -> TokenManager:
    """Process-wide manager built from ``config``."""
    return TokenManager(config.jwt_secret, config.jwt_expiry_seconds)
