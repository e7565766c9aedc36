"""Bearer-token authentication for server-side normalization endpoints."""

from __future__ import annotations

import hmac
import logging
import os
from typing import Optional

from fastapi import Header, HTTPException, status

logger = logging.getLogger(__name__)

AUTH_TOKEN_ENV = "API_AUTH_TOKEN"


class AuthenticationError(HTTPException):
    """Custom exception for authentication failures."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def verify_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Verify bearer token from Authorization header.

    Args:
        authorization: Authorization header value (format: "Bearer <token>")

    Returns:
        The validated token

    Raises:
        AuthenticationError: If token is missing or invalid
    """
    if not authorization:
        raise AuthenticationError("Missing Authorization header")

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid Authorization header format. Expected 'Bearer <token>'")

    token = authorization[7:]
    if not token:
        raise AuthenticationError("Missing bearer token")

    expected_token = os.getenv(AUTH_TOKEN_ENV)
    if not expected_token:
        logger.error(f"{AUTH_TOKEN_ENV} environment variable not set")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server authentication not configured",
        )

    if not hmac.compare_digest(token, expected_token):
        logger.warning(
            "Invalid authentication token attempt",
            extra={"token_prefix": token[:8] if len(token) >= 8 else token},
        )
        raise AuthenticationError("Invalid bearer token")

    return token
