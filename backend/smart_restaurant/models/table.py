"""Dining table model."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from smart_restaurant.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, enum_values
from smart_restaurant.models.validators import within


class TableStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    INACTIVE = "inactive"


class Table(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Restaurant table for seating.

    ``qr_token`` is a display copy of the last issued QR token. It is never
    consulted when a guest token is verified.
    """

    __tablename__ = "tables"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "table_number", name="uq_tables_restaurant_number"),
    )

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), index=True, nullable=False,
    )
    table_number: Mapped[str] = mapped_column(String(50), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=4, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # Patio, Bar, VIP
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[TableStatus] = mapped_column(
        enum_values(TableStatus), default=TableStatus.AVAILABLE, nullable=False,
    )
    qr_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    qr_token_created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    @validates("capacity")
    def _validate_capacity(self, key, value):
        return within(key, value, 1, 20)
