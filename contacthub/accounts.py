"""
User registration and login.
"""

from __future__ import annotations

import logging

from fastapi.concurrency import run_in_threadpool

from contacthub.db import DbClient, UserRecord
from contacthub.errors import InvalidCredentials
from contacthub.security import TokenService, hash_password, verify_password

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, db: DbClient, tokens: TokenService, bcrypt_rounds: int = 8):
        self._db = db
        self._tokens = tokens
        self._bcrypt_rounds = bcrypt_rounds

    async def register(self, name: str, email: str, password: str) -> UserRecord:
        """Store a new user with a salted hash of ``password``.

        Raises EmailAlreadyRegistered when the email is taken.
        """
        password_hash = await run_in_threadpool(
            hash_password, password, self._bcrypt_rounds
        )
        user = await run_in_threadpool(self._db.create_user, name, email, password_hash)
        logger.info("Registered user %s", user.user_id)
        return user

    async def login(self, email: str, password: str) -> str:
        """Return a bearer token for valid credentials."""
        user = await run_in_threadpool(self._db.find_user_by_email, email)
        if user is None or not await run_in_threadpool(
            verify_password, password, user.password_hash
        ):
            logger.info("Rejected login for %s", email)
            raise InvalidCredentials()
        return self._tokens.issue(user.user_id)
