"""Restaurant (tenant) model."""

from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from smart_restaurant.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Restaurant(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Tenant boundary. Every catalog, table and order row belongs to one."""

    __tablename__ = "restaurants"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
