"""
Bearer token verification.

Tokens are issued by the external auth provider and signed with a shared
secret. This service never issues tokens, it only reads `sub` (the user id)
and the display name from the claims.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from eventhub.core.config import get_settings
from eventhub.core.logging import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: uuid.UUID
    name: str


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        options=options,
    )


def _display_name(claims: dict) -> str:
    metadata = claims.get("user_metadata") or {}
    return (
        claims.get("name")
        or metadata.get("full_name")
        or metadata.get("name")
        or claims.get("email")
        or "Organizer"
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        claims = decode_access_token(credentials.credentials)
        user_id = uuid.UUID(claims["sub"])
    except (JWTError, KeyError, ValueError) as e:
        logger.warning("token_rejected", error=str(e))
        raise credentials_exception

    return CurrentUser(id=user_id, name=_display_name(claims))


def get_current_user_id(user: CurrentUser = Depends(get_current_user)) -> uuid.UUID:
    return user.id
