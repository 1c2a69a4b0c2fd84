"""Admin catalog routes - categories, items, photos, modifier groups."""

import uuid
from typing import Optional

from fastapi import APIRouter, Query, status

from smart_restaurant.api.deps import MenuEngine
from smart_restaurant.core.rbac import RestaurantId
from smart_restaurant.db.session import DbSession
from smart_restaurant.models.menu import CategoryStatus, MenuItemStatus
from smart_restaurant.schemas.catalog import (
    AttachModifierGroups, CategoryCreate, CategoryStatusUpdate, CategoryUpdate,
    MenuItemCreate, MenuItemUpdate, ModifierGroupCreate, ModifierGroupUpdate,
    ModifierOptionCreate, ModifierOptionUpdate, PhotoBatchCreate,
)
from smart_restaurant.schemas.menu_query import (
    DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, AdminItemSortField, CategoryQuery,
    CategorySortField, MenuFilter, MenuQuery, PageSpec, SortField, SortOrder, SortSpec,
)
from smart_restaurant.services.catalog_service import (
    CategoryService, MenuItemService, ModifierService,
)

router = APIRouter()


# ==================== CATEGORIES ====================

@router.get("/categories")
def list_categories(
    restaurant_id: RestaurantId,
    engine: MenuEngine,
    search: Optional[str] = Query(None, max_length=100),
    category_status: Optional[CategoryStatus] = Query(None, alias="status"),
    sort_by: CategorySortField = Query(CategorySortField.DISPLAY_ORDER, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder"),
):
    """List categories with item counts.

    ``sortBy=itemCount&sortOrder=asc`` returns the fullest categories first.
    """
    query = CategoryQuery(
        search=search,
        status=category_status,
        sort=SortSpec(field=SortField(sort_by.value), order=sort_order),
    )
    return engine.list_categories(restaurant_id, query)


@router.post("/categories", status_code=status.HTTP_201_CREATED)
def create_category(restaurant_id: RestaurantId, db: DbSession, body: CategoryCreate):
    return CategoryService(db, restaurant_id).create(body)


@router.put("/categories/{category_id}")
def update_category(
    restaurant_id: RestaurantId, db: DbSession, category_id: uuid.UUID, body: CategoryUpdate,
):
    return CategoryService(db, restaurant_id).update(category_id, body)


@router.patch("/categories/{category_id}/status")
def update_category_status(
    restaurant_id: RestaurantId, db: DbSession, category_id: uuid.UUID, body: CategoryStatusUpdate,
):
    return CategoryService(db, restaurant_id).set_status(category_id, body.status)


@router.delete("/categories/{category_id}")
def delete_category(restaurant_id: RestaurantId, db: DbSession, category_id: uuid.UUID):
    return CategoryService(db, restaurant_id).delete(category_id)


# ==================== ITEMS ====================

@router.get("/items")
def list_items(
    restaurant_id: RestaurantId,
    engine: MenuEngine,
    search: Optional[str] = Query(None, max_length=100),
    category_id: Optional[uuid.UUID] = Query(None, alias="categoryId"),
    item_status: Optional[MenuItemStatus] = Query(None, alias="status"),
    chef_recommended: Optional[bool] = Query(None, alias="chefRecommended"),
    sort_by: AdminItemSortField = Query(AdminItemSortField.NAME, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """Every non-deleted item of the restaurant, grouped by category."""
    query = MenuQuery(
        filter=MenuFilter(
            search=search,
            category_id=category_id,
            chef_recommended=chef_recommended,
            status=item_status,
        ),
        sort=SortSpec(field=SortField(sort_by.value), order=sort_order),
        page=PageSpec(page=page, limit=limit),
    )
    return engine.admin_items(restaurant_id, query)


@router.post("/items", status_code=status.HTTP_201_CREATED)
def create_item(restaurant_id: RestaurantId, db: DbSession, body: MenuItemCreate):
    return MenuItemService(db, restaurant_id).create(body)


@router.get("/items/{item_id}")
def get_item(restaurant_id: RestaurantId, db: DbSession, item_id: uuid.UUID):
    return MenuItemService(db, restaurant_id).get(item_id)


@router.put("/items/{item_id}")
def update_item(restaurant_id: RestaurantId, db: DbSession, item_id: uuid.UUID, body: MenuItemUpdate):
    return MenuItemService(db, restaurant_id).update(item_id, body)


@router.delete("/items/{item_id}")
def delete_item(restaurant_id: RestaurantId, db: DbSession, item_id: uuid.UUID):
    return MenuItemService(db, restaurant_id).delete(item_id)


@router.post("/items/{item_id}/modifier-groups")
def attach_modifier_groups(
    restaurant_id: RestaurantId, db: DbSession, item_id: uuid.UUID, body: AttachModifierGroups,
):
    """Replace the item's modifier groups."""
    return MenuItemService(db, restaurant_id).attach_modifier_groups(item_id, body.group_ids)


# ==================== PHOTOS ====================

@router.get("/items/{item_id}/photos")
def list_photos(restaurant_id: RestaurantId, db: DbSession, item_id: uuid.UUID):
    return MenuItemService(db, restaurant_id).list_photos(item_id)


@router.post("/items/{item_id}/photos", status_code=status.HTTP_201_CREATED)
def add_photos(restaurant_id: RestaurantId, db: DbSession, item_id: uuid.UUID, body: PhotoBatchCreate):
    return MenuItemService(db, restaurant_id).add_photos(item_id, body.photos)


@router.delete("/items/{item_id}/photos/{photo_id}")
def delete_photo(restaurant_id: RestaurantId, db: DbSession, item_id: uuid.UUID, photo_id: uuid.UUID):
    return MenuItemService(db, restaurant_id).delete_photo(item_id, photo_id)


@router.patch("/items/{item_id}/photos/{photo_id}/primary")
def set_primary_photo(
    restaurant_id: RestaurantId, db: DbSession, item_id: uuid.UUID, photo_id: uuid.UUID,
):
    return MenuItemService(db, restaurant_id).set_primary_photo(item_id, photo_id)


# ==================== MODIFIER GROUPS ====================

@router.get("/modifier-groups")
def list_modifier_groups(restaurant_id: RestaurantId, db: DbSession):
    return ModifierService(db, restaurant_id).list_groups()


@router.post("/modifier-groups", status_code=status.HTTP_201_CREATED)
def create_modifier_group(restaurant_id: RestaurantId, db: DbSession, body: ModifierGroupCreate):
    return ModifierService(db, restaurant_id).create_group(body)


@router.get("/modifier-groups/{group_id}")
def get_modifier_group(restaurant_id: RestaurantId, db: DbSession, group_id: uuid.UUID):
    return ModifierService(db, restaurant_id).get(group_id)


@router.put("/modifier-groups/{group_id}")
def update_modifier_group(
    restaurant_id: RestaurantId, db: DbSession, group_id: uuid.UUID, body: ModifierGroupUpdate,
):
    return ModifierService(db, restaurant_id).update_group(group_id, body)


@router.post("/modifier-groups/{group_id}/options", status_code=status.HTTP_201_CREATED)
def add_modifier_option(
    restaurant_id: RestaurantId, db: DbSession, group_id: uuid.UUID, body: ModifierOptionCreate,
):
    return ModifierService(db, restaurant_id).add_option(group_id, body)


@router.put("/modifier-groups/{group_id}/options/{option_id}")
def update_modifier_option(
    restaurant_id: RestaurantId,
    db: DbSession,
    group_id: uuid.UUID,
    option_id: uuid.UUID,
    body: ModifierOptionUpdate,
):
    return ModifierService(db, restaurant_id).update_option(group_id, option_id, body)
