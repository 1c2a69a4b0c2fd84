"""SQLAlchemy models."""

from smart_restaurant.models.restaurant import Restaurant
from smart_restaurant.models.user import User
from smart_restaurant.models.menu import (
    CategoryStatus,
    MenuCategory,
    MenuItem,
    MenuItemPhoto,
    MenuItemStatus,
    ModifierGroup,
    ModifierOption,
    ModifierSelectionType,
    ModifierStatus,
    menu_item_modifier_groups,
)
from smart_restaurant.models.table import Table, TableStatus
from smart_restaurant.models.order import (
    OPEN_ORDER_STATUSES,
    Order,
    OrderItem,
    OrderItemStatus,
    OrderStatus,
)

__all__ = [
    "Restaurant",
    "User",
    "CategoryStatus",
    "MenuCategory",
    "MenuItem",
    "MenuItemPhoto",
    "MenuItemStatus",
    "ModifierGroup",
    "ModifierOption",
    "ModifierSelectionType",
    "ModifierStatus",
    "menu_item_modifier_groups",
    "Table",
    "TableStatus",
    "OPEN_ORDER_STATUSES",
    "Order",
    "OrderItem",
    "OrderItemStatus",
    "OrderStatus",
]
