"""
Password hashing and bearer token issuance.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

import bcrypt
import jwt

from contacthub.errors import InvalidToken

USER_ID_CLAIM = "userId"


def hash_password(password: str, rounds: int = 8) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


@dataclass
class TokenService:
    """Stateless HMAC-signed tokens carrying the user id."""

    secret: str
    algorithm: str = "HS256"
    ttl_seconds: int = 0

    def issue(self, user_id: str) -> str:
        now = int(time.time())
        claims = {USER_ID_CLAIM: user_id, "iat": now}
        if self.ttl_seconds:
            claims["exp"] = now + self.ttl_seconds
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the user id encoded in ``token`` or raise InvalidToken."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise InvalidToken(str(exc)) from exc
        user_id = claims.get(USER_ID_CLAIM)
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken(f"Token has no {USER_ID_CLAIM} claim")
        return user_id
