"""Authentication routes."""

import logging

from fastapi import APIRouter, Request

from smart_restaurant.core.errors import Unauthorized
from smart_restaurant.core.rate_limit import limiter
from smart_restaurant.core.rbac import CurrentUser
from smart_restaurant.core.security import create_access_token, user_claims, verify_password
from smart_restaurant.db.session import DbSession
from smart_restaurant.models.user import User
from smart_restaurant.schemas.auth import LoginRequest, Token

logger = logging.getLogger("auth")

router = APIRouter()


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
def login(request: Request, login_request: LoginRequest, db: DbSession):
    """Authenticate a back-office user and return a JWT access token."""
    client_ip = request.client.host if request.client else "unknown"
    email = login_request.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if not user or not verify_password(login_request.password, user.password_hash):
        logger.warning(f"Failed login attempt for email: {email} from IP: {client_ip}")
        raise Unauthorized("Invalid email or password")
    if not user.is_active:
        logger.warning(f"Login attempt for inactive user: {email} (ID: {user.id}) from IP: {client_ip}")
        raise Unauthorized("User account is inactive")

    logger.info(f"Successful login: {user.email} (ID: {user.id}, role: {user.role.value}) from IP: {client_ip}")
    token = create_access_token(data=user_claims(user))
    return Token(access_token=token)


@router.get("/me")
def read_me(current_user: CurrentUser):
    return {
        "id": str(current_user.user_id),
        "email": current_user.email,
        "role": current_user.role.value,
        "restaurantId": str(current_user.restaurant_id) if current_user.restaurant_id else None,
    }
