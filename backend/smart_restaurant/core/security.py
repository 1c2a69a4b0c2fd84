"""Back-office credentials: bcrypt password hashes and JWT access tokens.

Access tokens are signed with ``settings.secret_key`` and always carry ``sub``
and ``exp``. Table QR tokens are a separate credential (see ``qr_token``) and
never satisfy :func:`decode_access_token`.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt
from jwt.exceptions import PyJWTError

from smart_restaurant.core.config import settings

if TYPE_CHECKING:
    from smart_restaurant.models.user import User

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(_ENCODING), bcrypt.gensalt()).decode(_ENCODING)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(plain_password.encode(_ENCODING), hashed_password.encode(_ENCODING))
    except ValueError as e:
        logger.warning(f"Password verification error: {e}")
        return False


def user_claims(user: User) -> dict[str, Any]:
    """Claims identifying a staff user and the restaurant they administer."""
    return {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "restaurant_id": str(user.restaurant_id) if user.restaurant_id else None,
    }


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    lifetime = expires_delta if expires_delta is not None else timedelta(
        minutes=settings.access_token_expire_minutes
    )
    payload = {
        **data,
        "iat": now,
        "exp": now + lifetime,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode an access token, or return None if it is invalid or expired."""
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": ["exp", "sub"]},
        )
    except PyJWTError as e:
        logger.debug(f"Access token rejected: {e}")
        return None
