"""
Bearer token helpers.

Tokens are HS256 JWTs whose ``sub`` claim is the user id, matching what the
hosted auth provider issues for signed-in members.
"""
from datetime import timedelta
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from brigade.core.config import settings
from brigade.core.exceptions import UnauthorizedError
from brigade.core.time_utils import utc_now


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an access token for ``user_id``."""
    expire = utc_now() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {"sub": str(user_id), "exp": expire, "type": "access"}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate an access token.

    Raises:
        UnauthorizedError: signature, expiry or claims are invalid
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise UnauthorizedError("Could not validate credentials") from exc

    if payload.get("type", "access") != "access":
        raise UnauthorizedError("Invalid token type")
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise UnauthorizedError("Could not validate credentials")
    return payload
