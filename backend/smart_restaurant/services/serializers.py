"""ORM -> JSON-ready dict conversion (camelCase keys)."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from smart_restaurant.models.menu import (
    MenuCategory, MenuItem, MenuItemPhoto, ModifierGroup, ModifierOption, ModifierStatus,
)
from smart_restaurant.models.table import Table


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything is stored as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value else None


def _enum_value(value) -> Any:
    return getattr(value, "value", value)


def category_to_dict(category: MenuCategory) -> Dict[str, Any]:
    return {
        "id": str(category.id),
        "name": category.name,
        "description": category.description,
        "displayOrder": category.display_order,
        "status": _enum_value(category.status),
        "createdAt": iso(category.created_at),
    }


def photo_to_dict(photo: MenuItemPhoto) -> Dict[str, Any]:
    return {
        "id": str(photo.id),
        "menuItemId": str(photo.menu_item_id),
        "url": photo.url,
        "isPrimary": photo.is_primary,
        "createdAt": iso(photo.created_at),
    }


def option_to_dict(option: ModifierOption) -> Dict[str, Any]:
    return {
        "id": str(option.id),
        "groupId": str(option.group_id),
        "name": option.name,
        "priceAdjustment": float(option.price_adjustment),
        "status": _enum_value(option.status),
    }


def modifier_group_to_dict(group: ModifierGroup, active_only: bool = False) -> Dict[str, Any]:
    options = group.options
    if active_only:
        options = [o for o in options if o.status == ModifierStatus.ACTIVE]
    return {
        "id": str(group.id),
        "name": group.name,
        "selectionType": _enum_value(group.selection_type),
        "isRequired": group.is_required,
        "minSelections": group.min_selections,
        "maxSelections": group.max_selections,
        "displayOrder": group.display_order,
        "status": _enum_value(group.status),
        "options": [option_to_dict(o) for o in options],
    }


def menu_item_to_dict(item: MenuItem, guest: bool = False) -> Dict[str, Any]:
    """Serialize a menu item with its photos, modifiers and category.

    Guest output only carries active modifier groups and options.
    """
    groups = item.modifier_groups
    if guest:
        groups = [g for g in groups if g.status == ModifierStatus.ACTIVE]
    primary = next((p for p in item.photos if p.is_primary), None)
    return {
        "id": str(item.id),
        "categoryId": str(item.category_id),
        "name": item.name,
        "description": item.description,
        "price": float(item.price),
        "prepTimeMinutes": item.prep_time_minutes,
        "status": _enum_value(item.status),
        "isChefRecommended": item.is_chef_recommended,
        "createdAt": iso(item.created_at),
        "updatedAt": iso(item.updated_at),
        "primaryPhotoUrl": primary.url if primary else None,
        "photos": [photo_to_dict(p) for p in item.photos],
        "modifierGroups": [modifier_group_to_dict(g, active_only=guest) for g in groups],
        "category": category_to_dict(item.category),
    }


def table_to_dict(table: Table, include_token: bool = True) -> Dict[str, Any]:
    data = {
        "id": str(table.id),
        "tableNumber": table.table_number,
        "capacity": table.capacity,
        "location": table.location,
        "description": table.description,
        "status": _enum_value(table.status),
        "qrTokenCreatedAt": iso(table.qr_token_created_at),
        "createdAt": iso(table.created_at),
        "updatedAt": iso(table.updated_at),
    }
    if include_token:
        data["qrToken"] = table.qr_token
    return data
