"""Catalog management - categories, items, photos and modifier groups.

Every service is bound to one restaurant. Rows of other restaurants are
reported as missing.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from smart_restaurant.core.db_errors import translate_db_errors
from smart_restaurant.core.errors import BadRequest, NotFound
from smart_restaurant.core.responses import list_response
from smart_restaurant.models.menu import (
    CategoryStatus, MenuCategory, MenuItem, MenuItemPhoto, MenuItemStatus,
    ModifierGroup, ModifierOption,
)
from smart_restaurant.schemas.catalog import (
    CategoryCreate, CategoryUpdate, MenuItemCreate, MenuItemUpdate,
    ModifierGroupCreate, ModifierGroupUpdate, ModifierOptionCreate,
    ModifierOptionUpdate, PhotoCreate,
)
from smart_restaurant.services.serializers import (
    category_to_dict, menu_item_to_dict, modifier_group_to_dict, option_to_dict, photo_to_dict,
)

logger = logging.getLogger(__name__)


def apply_changes(obj: Any, changes: Dict[str, Any]) -> None:
    """Set attributes, turning ORM validator errors into 400s."""
    try:
        for key, value in changes.items():
            setattr(obj, key, value)
    except ValueError as e:
        raise BadRequest(str(e)) from e


class _RestaurantScoped:
    def __init__(self, db: Session, restaurant_id: uuid.UUID) -> None:
        self.db = db
        self.restaurant_id = restaurant_id


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

class CategoryService(_RestaurantScoped):
    """Create, update and retire menu categories."""

    DUPLICATE_MESSAGE = "Category name already exists"

    def get(self, category_id: uuid.UUID) -> MenuCategory:
        category = self.db.query(MenuCategory).filter(
            MenuCategory.id == category_id,
            MenuCategory.restaurant_id == self.restaurant_id,
        ).first()
        if category is None:
            raise NotFound("Category not found")
        return category

    def create(self, data: CategoryCreate) -> Dict[str, Any]:
        category = MenuCategory(restaurant_id=self.restaurant_id)
        apply_changes(category, data.model_dump())
        with translate_db_errors(self.db, self.DUPLICATE_MESSAGE):
            self.db.add(category)
            self.db.commit()
        self.db.refresh(category)
        logger.info(f"Created category {category.id} '{category.name}' for restaurant {self.restaurant_id}")
        return category_to_dict(category)

    def update(self, category_id: uuid.UUID, data: CategoryUpdate) -> Dict[str, Any]:
        category = self.get(category_id)
        changes = data.model_dump(exclude_unset=True)
        apply_changes(category, {k: v for k, v in changes.items() if v is not None or k == "description"})
        with translate_db_errors(self.db, self.DUPLICATE_MESSAGE):
            self.db.commit()
        self.db.refresh(category)
        return category_to_dict(category)

    def set_status(self, category_id: uuid.UUID, status: CategoryStatus) -> Dict[str, Any]:
        category = self.get(category_id)
        category.status = status
        with translate_db_errors(self.db):
            self.db.commit()
        self.db.refresh(category)
        return category_to_dict(category)

    def delete(self, category_id: uuid.UUID) -> Dict[str, Any]:
        """Retire a category by marking it inactive.

        Refused while the category still holds non-deleted items.
        """
        category = self.get(category_id)
        remaining = self.db.query(MenuItem).filter(
            MenuItem.category_id == category.id,
            MenuItem.not_deleted(),
        ).count()
        if remaining:
            raise BadRequest(
                f"Cannot delete category with {remaining} active item(s). "
                "Move or delete the items first."
            )
        category.status = CategoryStatus.INACTIVE
        with translate_db_errors(self.db):
            self.db.commit()
        logger.info(f"Deactivated category {category.id} for restaurant {self.restaurant_id}")
        return {"id": str(category.id), "status": category.status.value}


# ---------------------------------------------------------------------------
# Items and photos
# ---------------------------------------------------------------------------

class MenuItemService(_RestaurantScoped):
    """Menu item lifecycle, photos and modifier attachments."""

    def get_model(self, item_id: uuid.UUID) -> MenuItem:
        item = self.db.query(MenuItem).filter(
            MenuItem.id == item_id,
            MenuItem.restaurant_id == self.restaurant_id,
            MenuItem.not_deleted(),
        ).first()
        if item is None:
            raise NotFound("Menu item not found")
        return item

    def get(self, item_id: uuid.UUID) -> Dict[str, Any]:
        return menu_item_to_dict(self.get_model(item_id))

    def _check_category(self, category_id: uuid.UUID) -> None:
        CategoryService(self.db, self.restaurant_id).get(category_id)

    def create(self, data: MenuItemCreate) -> Dict[str, Any]:
        self._check_category(data.category_id)
        item = MenuItem(restaurant_id=self.restaurant_id)
        apply_changes(item, data.model_dump())
        with translate_db_errors(self.db):
            self.db.add(item)
            self.db.commit()
        self.db.refresh(item)
        logger.info(f"Created menu item {item.id} '{item.name}' for restaurant {self.restaurant_id}")
        return menu_item_to_dict(item)

    def update(self, item_id: uuid.UUID, data: MenuItemUpdate) -> Dict[str, Any]:
        item = self.get_model(item_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("category_id") is not None:
            self._check_category(changes["category_id"])
        apply_changes(item, {k: v for k, v in changes.items() if v is not None})
        with translate_db_errors(self.db):
            self.db.commit()
        self.db.refresh(item)
        return menu_item_to_dict(item)

    def delete(self, item_id: uuid.UUID) -> Dict[str, Any]:
        item = self.get_model(item_id)
        item.soft_delete()
        item.status = MenuItemStatus.UNAVAILABLE
        with translate_db_errors(self.db):
            self.db.commit()
        logger.info(f"Soft-deleted menu item {item.id} for restaurant {self.restaurant_id}")
        return {"id": str(item.id), "isDeleted": True}

    def attach_modifier_groups(self, item_id: uuid.UUID, group_ids: Iterable[uuid.UUID]) -> Dict[str, Any]:
        """Replace the item's modifier groups with ``group_ids``."""
        item = self.get_model(item_id)
        wanted = list(dict.fromkeys(group_ids))
        groups: List[ModifierGroup] = []
        if wanted:
            groups = self.db.query(ModifierGroup).filter(
                ModifierGroup.id.in_(wanted),
                ModifierGroup.restaurant_id == self.restaurant_id,
            ).all()
            if len(groups) != len(wanted):
                raise BadRequest("One or more modifier groups do not belong to this restaurant")
        item.modifier_groups = groups
        with translate_db_errors(self.db):
            self.db.commit()
        self.db.refresh(item)
        return menu_item_to_dict(item)

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    def _photo(self, item: MenuItem, photo_id: uuid.UUID) -> MenuItemPhoto:
        photo = self.db.query(MenuItemPhoto).filter(
            MenuItemPhoto.id == photo_id,
            MenuItemPhoto.menu_item_id == item.id,
        ).first()
        if photo is None:
            raise NotFound("Photo not found")
        return photo

    def list_photos(self, item_id: uuid.UUID) -> Dict[str, Any]:
        item = self.get_model(item_id)
        photos = self.db.query(MenuItemPhoto).filter(
            MenuItemPhoto.menu_item_id == item.id,
        ).order_by(MenuItemPhoto.created_at.desc()).all()
        return list_response([photo_to_dict(p) for p in photos])

    def add_photos(self, item_id: uuid.UUID, photos: List[PhotoCreate]) -> Dict[str, Any]:
        """Register photo records. The first one becomes primary if none is."""
        item = self.get_model(item_id)
        has_primary = self.db.query(MenuItemPhoto).filter(
            MenuItemPhoto.menu_item_id == item.id,
            MenuItemPhoto.is_primary.is_(True),
        ).count() > 0

        created = []
        for index, photo in enumerate(photos):
            record = MenuItemPhoto(
                menu_item_id=item.id,
                url=photo.url,
                storage_key=photo.storage_key,
                is_primary=not has_primary and index == 0,
            )
            self.db.add(record)
            created.append(record)
        with translate_db_errors(self.db):
            self.db.commit()
        for record in created:
            self.db.refresh(record)
        return list_response([photo_to_dict(p) for p in created])

    def delete_photo(self, item_id: uuid.UUID, photo_id: uuid.UUID) -> Dict[str, Any]:
        """Delete a photo. Deleting the primary promotes the newest remaining one."""
        item = self.get_model(item_id)
        photo = self._photo(item, photo_id)
        was_primary = photo.is_primary
        self.db.delete(photo)
        self.db.flush()

        promoted = None
        if was_primary:
            promoted = self.db.query(MenuItemPhoto).filter(
                MenuItemPhoto.menu_item_id == item.id,
            ).order_by(MenuItemPhoto.created_at.desc()).first()
            if promoted is not None:
                promoted.is_primary = True
        with translate_db_errors(self.db):
            self.db.commit()
        return {
            "id": str(photo_id),
            "deleted": True,
            "newPrimaryId": str(promoted.id) if promoted else None,
        }

    def set_primary_photo(self, item_id: uuid.UUID, photo_id: uuid.UUID) -> Dict[str, Any]:
        item = self.get_model(item_id)
        photo = self._photo(item, photo_id)
        self.db.query(MenuItemPhoto).filter(
            MenuItemPhoto.menu_item_id == item.id,
            MenuItemPhoto.id != photo.id,
        ).update({MenuItemPhoto.is_primary: False}, synchronize_session="fetch")
        photo.is_primary = True
        with translate_db_errors(self.db):
            self.db.commit()
        self.db.refresh(photo)
        return photo_to_dict(photo)


# ---------------------------------------------------------------------------
# Modifier groups
# ---------------------------------------------------------------------------

class ModifierService(_RestaurantScoped):
    """Modifier groups and their options."""

    def get_model(self, group_id: uuid.UUID) -> ModifierGroup:
        group = self.db.query(ModifierGroup).filter(
            ModifierGroup.id == group_id,
            ModifierGroup.restaurant_id == self.restaurant_id,
        ).first()
        if group is None:
            raise NotFound("Modifier group not found")
        return group

    def list_groups(self) -> Dict[str, Any]:
        groups = self.db.query(ModifierGroup).filter(
            ModifierGroup.restaurant_id == self.restaurant_id,
        ).order_by(ModifierGroup.display_order, ModifierGroup.name).all()
        return list_response([modifier_group_to_dict(g) for g in groups])

    def get(self, group_id: uuid.UUID) -> Dict[str, Any]:
        return modifier_group_to_dict(self.get_model(group_id))

    def create_group(self, data: ModifierGroupCreate) -> Dict[str, Any]:
        group = ModifierGroup(restaurant_id=self.restaurant_id)
        apply_changes(group, data.model_dump(exclude={"options"}))
        for option in data.options:
            record = ModifierOption()
            apply_changes(record, option.model_dump())
            group.options.append(record)
        with translate_db_errors(self.db):
            self.db.add(group)
            self.db.commit()
        self.db.refresh(group)
        return modifier_group_to_dict(group)

    def update_group(self, group_id: uuid.UUID, data: ModifierGroupUpdate) -> Dict[str, Any]:
        group = self.get_model(group_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        min_selections = changes.get("min_selections", group.min_selections)
        max_selections = changes.get("max_selections", group.max_selections)
        if max_selections < min_selections:
            raise BadRequest("maxSelections must be greater than or equal to minSelections")
        apply_changes(group, changes)
        with translate_db_errors(self.db):
            self.db.commit()
        self.db.refresh(group)
        return modifier_group_to_dict(group)

    def add_option(self, group_id: uuid.UUID, data: ModifierOptionCreate) -> Dict[str, Any]:
        group = self.get_model(group_id)
        option = ModifierOption(group_id=group.id)
        apply_changes(option, data.model_dump())
        with translate_db_errors(self.db):
            self.db.add(option)
            self.db.commit()
        self.db.refresh(option)
        return option_to_dict(option)

    def update_option(
        self, group_id: uuid.UUID, option_id: uuid.UUID, data: ModifierOptionUpdate,
    ) -> Dict[str, Any]:
        group = self.get_model(group_id)
        option = self.db.query(ModifierOption).filter(
            ModifierOption.id == option_id,
            ModifierOption.group_id == group.id,
        ).first()
        if option is None:
            raise NotFound("Modifier option not found")
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        apply_changes(option, changes)
        with translate_db_errors(self.db):
            self.db.commit()
        self.db.refresh(option)
        return option_to_dict(option)
