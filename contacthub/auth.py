"""Bearer token verification for protected routes."""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from contacthub.dependencies import get_token_service
from contacthub.errors import InvalidToken
from contacthub.security import TokenService

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


class AuthError(HTTPException):
    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Return the user id carried by the request's bearer token.

    A missing header, a non-Bearer scheme or a token that fails verification
    all end the request with 401 before the handler runs.
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Missing Bearer token.")
    try:
        return tokens.verify(credentials.credentials)
    except InvalidToken as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise AuthError("Invalid token.") from exc
