"""Menu catalog models - categories, items, photos, modifiers."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Table as SATable,
    Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from smart_restaurant.db.base import (
    Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin, enum_values, utcnow,
)
from smart_restaurant.models.validators import non_negative, positive, within


class CategoryStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MenuItemStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    SOLD_OUT = "sold_out"


class ModifierSelectionType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


class ModifierStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


menu_item_modifier_groups = SATable(
    "menu_item_modifier_groups",
    Base.metadata,
    Column("menu_item_id", Uuid, ForeignKey("menu_items.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", Uuid, ForeignKey("modifier_groups.id", ondelete="CASCADE"), primary_key=True),
)


class MenuCategory(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Menu category. Visible to guests only while active."""

    __tablename__ = "menu_categories"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "name", name="uq_menu_categories_restaurant_name"),
    )

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), index=True, nullable=False,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[CategoryStatus] = mapped_column(
        enum_values(CategoryStatus), default=CategoryStatus.ACTIVE, nullable=False,
    )

    items: Mapped[List["MenuItem"]] = relationship("MenuItem", back_populates="category")

    @validates("display_order")
    def _validate_display_order(self, key, value):
        return non_negative(key, value)


class MenuItem(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """Sellable menu item. Belongs to exactly one category of the same restaurant."""

    __tablename__ = "menu_items"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), index=True, nullable=False,
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("menu_categories.id"), index=True, nullable=False,
    )
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    prep_time_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[MenuItemStatus] = mapped_column(
        enum_values(MenuItemStatus), default=MenuItemStatus.AVAILABLE, nullable=False,
    )
    is_chef_recommended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    category: Mapped["MenuCategory"] = relationship("MenuCategory", back_populates="items")
    photos: Mapped[List["MenuItemPhoto"]] = relationship(
        "MenuItemPhoto",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="MenuItemPhoto.created_at.desc()",
    )
    modifier_groups: Mapped[List["ModifierGroup"]] = relationship(
        "ModifierGroup",
        secondary=menu_item_modifier_groups,
        order_by="ModifierGroup.display_order",
    )

    @validates("price")
    def _validate_price(self, key, value):
        return positive(key, value)

    @validates("prep_time_minutes")
    def _validate_prep_time(self, key, value):
        return within(key, value, 0, 240)


class MenuItemPhoto(Base, UUIDPrimaryKeyMixin):
    """Photo record for a menu item. At most one per item is primary."""

    __tablename__ = "menu_item_photos"

    menu_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("menu_items.id", ondelete="CASCADE"), index=True, nullable=False,
    )
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    storage_key: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False,
    )

    menu_item: Mapped["MenuItem"] = relationship("MenuItem", back_populates="photos")


class ModifierGroup(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Group of modifier options (e.g. "Size", "Extras")."""

    __tablename__ = "modifier_groups"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), index=True, nullable=False,
    )
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    selection_type: Mapped[ModifierSelectionType] = mapped_column(
        enum_values(ModifierSelectionType), default=ModifierSelectionType.SINGLE, nullable=False,
    )
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    min_selections: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_selections: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[ModifierStatus] = mapped_column(
        enum_values(ModifierStatus), default=ModifierStatus.ACTIVE, nullable=False,
    )

    options: Mapped[List["ModifierOption"]] = relationship(
        "ModifierOption",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="ModifierOption.created_at",
    )

    @validates("min_selections", "max_selections", "display_order")
    def _validate_counts(self, key, value):
        return non_negative(key, value)


class ModifierOption(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Single choice inside a modifier group."""

    __tablename__ = "modifier_options"

    group_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("modifier_groups.id", ondelete="CASCADE"), index=True, nullable=False,
    )
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    price_adjustment: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    status: Mapped[ModifierStatus] = mapped_column(
        enum_values(ModifierStatus), default=ModifierStatus.ACTIVE, nullable=False,
    )

    group: Mapped["ModifierGroup"] = relationship("ModifierGroup", back_populates="options")

    @validates("price_adjustment")
    def _validate_price_adjustment(self, key, value):
        return non_negative(key, value)
