"""
Bearer token handling for identities issued by the auth service.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from backoffice.core.config import settings
from backoffice.core.exceptions import UnauthorizedError
from backoffice.core.logging import get_logger

logger = get_logger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Identity:
    """Caller identity extracted from a verified token."""

    user_id: UUID
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.jwt_expiration_hours)
    )
    to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc)})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT access token."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError as e:
        logger.warning("Invalid JWT token", error=str(e))
        return None


def identity_from_token(token: str) -> Identity:
    """Turn a bearer token into an Identity, or raise UnauthorizedError."""
    payload = decode_access_token(token)
    if payload is None:
        raise UnauthorizedError("Invalid token")

    subject = payload.get("sub") or payload.get("id")
    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise UnauthorizedError("Invalid token subject")

    return Identity(user_id=user_id, role=str(payload.get("role", "user")))
