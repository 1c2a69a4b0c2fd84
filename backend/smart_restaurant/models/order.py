"""Guest order models.

Only the columns needed for popularity ranking and the active-order
checks on tables are modelled here.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from smart_restaurant.db.base import Base, UUIDPrimaryKeyMixin, enum_values, utcnow
from smart_restaurant.models.validators import positive


class OrderStatus(str, Enum):
    ACTIVE = "active"
    PAYMENT_PENDING = "payment_pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderItemStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"


# Orders in these states keep a table busy
OPEN_ORDER_STATUSES = (OrderStatus.ACTIVE, OrderStatus.PAYMENT_PENDING)


class Order(Base, UUIDPrimaryKeyMixin):
    """A guest order placed at a table."""

    __tablename__ = "orders"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), index=True, nullable=False,
    )
    table_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("tables.id", ondelete="SET NULL"), index=True, nullable=True,
    )
    status: Mapped[OrderStatus] = mapped_column(
        enum_values(OrderStatus), default=OrderStatus.ACTIVE, nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True, nullable=False,
    )

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan",
    )


class OrderItem(Base, UUIDPrimaryKeyMixin):
    """A line on a guest order."""

    __tablename__ = "order_items"

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False,
    )
    menu_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("menu_items.id"), index=True, nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[OrderItemStatus] = mapped_column(
        enum_values(OrderItemStatus), default=OrderItemStatus.PENDING, nullable=False,
    )

    order: Mapped["Order"] = relationship("Order", back_populates="items")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)
