"""Bearer Tokens — HS256 JWTs carrying the storefront user id.

Invariants:
    - Payload carries userId, role, optional email, iat and exp (unix seconds)
    - Only HS256 is accepted; alg=none and asymmetric algs are rejected by PyJWT
    - verify() raises InvalidTokenError with a user-facing message, never returns None
    - Expired -> "Token expired"; anything else unverifiable -> "Invalid token"

Design Decisions:
    - Same claim names the login service signs ({userId, email, role}), so its
      tokens verify here unchanged given the shared secret
    - Role is embedded for logging only: authorization re-reads the user row
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

ALGORITHM = "HS256"


class InvalidTokenError(ValueError):
    """Token could not be verified."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str
    expires_at: int
    email: str | None = None


class TokenAuthenticator:
    """Issues and verifies signed bearer tokens."""

    def __init__(self, secret: str, ttl_seconds: int = 3600):
        self._secret = secret
        self._ttl_seconds = ttl_seconds

    def issue(
        self,
        user_id: int,
        role: str = "USER",
        email: str | None = None,
        now: datetime | None = None,
    ) -> str:
        issued = now or datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "role": role,
            "iat": issued,
            "exp": issued + timedelta(seconds=self._ttl_seconds),
        }
        if email is not None:
            payload["email"] = email
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token, self._secret, algorithms=[ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

        try:
            return TokenClaims(
                user_id=int(payload["userId"]),
                role=str(payload.get("role", "USER")),
                expires_at=int(payload["exp"]),
                email=payload.get("email"),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidTokenError("Invalid token") from e
