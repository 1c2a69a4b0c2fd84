"""Role-Based Access Control (RBAC) utilities."""

import logging
import uuid
from enum import Enum
from typing import Annotated, Optional

from fastapi import Depends, Request

from smart_restaurant.core.config import settings
from smart_restaurant.core.errors import Forbidden, ScopeResolutionFailure, Unauthorized
from smart_restaurant.core.security import decode_access_token
from smart_restaurant.db.session import DbSession

logger = logging.getLogger(__name__)

LEGACY_RESTAURANT_HEADER = "X-Restaurant-Id"


class UserRole(str, Enum):
    """User roles for RBAC."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    WAITER = "waiter"
    KITCHEN_STAFF = "kitchen_staff"


ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN)


class TokenData:
    """Decoded access token data.

    Attributes:
        user_id: The user's database ID.
        email: The user's email address.
        role: The user's role.
        restaurant_id: Restaurant the user works for (None for platform admins).
    """

    def __init__(self, user_id: uuid.UUID, email: str, role: UserRole,
                 restaurant_id: Optional[uuid.UUID] = None):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.restaurant_id = restaurant_id


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1] or None
    return None


def _parse_uuid(value) -> Optional[uuid.UUID]:
    if value is None:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


async def get_current_user(request: Request, db: DbSession) -> TokenData:
    """Get the current authenticated user from the Bearer token."""
    token = _bearer_token(request)
    payload = decode_access_token(token) if token else None

    if payload is None:
        raise Unauthorized()

    user_id = _parse_uuid(payload.get("sub"))
    email = payload.get("email")
    role = payload.get("role")

    if user_id is None or email is None or role is None:
        raise Unauthorized("Invalid token payload")

    try:
        user_role = UserRole(role)
    except ValueError:
        raise Unauthorized("Invalid role in token")

    # Verify user is still active in the database
    from smart_restaurant.models.user import User
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise Unauthorized("User account is disabled")

    return TokenData(
        user_id=user_id, email=email, role=user_role,
        restaurant_id=user.restaurant_id,
    )


def require_role(*roles: UserRole):
    """Dependency to require one of the given roles."""

    async def role_checker(
        current_user: Annotated[TokenData, Depends(get_current_user)]
    ) -> TokenData:
        if current_user.role not in roles:
            raise Forbidden(f"Requires role: {', '.join(r.value for r in roles)}")
        return current_user

    return role_checker


CurrentUser = Annotated[TokenData, Depends(get_current_user)]
RequireAdmin = Annotated[TokenData, Depends(require_role(*ADMIN_ROLES))]


async def get_restaurant_id(request: Request, current_user: RequireAdmin) -> uuid.UUID:
    """Resolve the restaurant an admin request operates on.

    The authenticated user's restaurant wins. The ``X-Restaurant-Id`` header
    is deprecated and only honoured when ``allow_legacy_restaurant_header``
    is enabled.
    """
    if current_user.restaurant_id is not None:
        return current_user.restaurant_id

    header_value = request.headers.get(LEGACY_RESTAURANT_HEADER)
    if header_value and settings.allow_legacy_restaurant_header:
        restaurant_id = _parse_uuid(header_value)
        if restaurant_id is not None:
            logger.warning(
                f"Deprecated {LEGACY_RESTAURANT_HEADER} header used by user {current_user.user_id} "
                f"for restaurant {restaurant_id}"
            )
            return restaurant_id

    raise ScopeResolutionFailure()


RestaurantId = Annotated[uuid.UUID, Depends(get_restaurant_id)]
