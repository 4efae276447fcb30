"""Verification of the session tokens issued by the login service."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from freshsip.config.settings import Settings
from freshsip.core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    """Identity carried by a verified token."""
    user_id: str
    role: str
    email: Optional[str] = None
    username: Optional[str] = None


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        raise UnauthorizedError("Invalid or expired token")


def verify_token(token: Optional[str], settings: Settings) -> AuthUser:
    """
    Verify a token and return the caller.

    Raises:
        UnauthorizedError: Token missing, invalid, expired, or without a user id
    """
    if not token:
        raise UnauthorizedError("Authentication required")

    payload = decode_token(token, settings)
    user_id = payload.get("userId") or payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise UnauthorizedError("Invalid token payload")

    return AuthUser(
        user_id=str(user_id),
        role=role,
        email=payload.get("email"),
        username=payload.get("username"),
    )


def create_access_token(data: Dict[str, Any], settings: Settings) -> str:
    """Sign a token with the shared secret (used by tooling and tests)."""
    return jwt.encode(dict(data), settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
