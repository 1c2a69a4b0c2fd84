"""User model."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from smart_restaurant.core.rbac import UserRole
from smart_restaurant.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, enum_values


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Back-office account for authentication and RBAC."""

    __tablename__ = "users"

    restaurant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("restaurants.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        enum_values(UserRole),
        default=UserRole.WAITER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
