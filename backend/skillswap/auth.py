"""
SkillSwap Backend: Bearer Token Verification
============================================

What:  Resolves the acting user's id from `Authorization: Bearer <jwt>`.
How:   Verifies an HS256 token with settings.jwt_secret and reads the `sub`
       claim as the user UUID. Issuing tokens is handled elsewhere.
Who:   `Depends(get_current_user_id)` on every authenticated route.
"""

import logging
import uuid
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from skillswap.config import settings
from skillswap.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)


def verify_token(token: str) -> uuid.UUID:
    """Decode and verify `token`; return the user id from its `sub` claim."""
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub"], "verify_exp": True},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError(message="Access token has expired") from e
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected bearer token: %s", str(e))
        raise AuthenticationError(message="Invalid access token") from e

    try:
        return uuid.UUID(str(claims["sub"]))
    except ValueError as e:
        raise AuthenticationError(message="Invalid access token") from e


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_security),
) -> uuid.UUID:
    if credentials is None:
        raise AuthenticationError()
    return verify_token(credentials.credentials)
