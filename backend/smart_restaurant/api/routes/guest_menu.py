"""Guest menu browsing - reached by scanning a table QR code."""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Query, Request

from smart_restaurant.api.deps import MenuEngine
from smart_restaurant.core.guard import GuestScopeDep
from smart_restaurant.core.rate_limit import limiter
from smart_restaurant.schemas.menu_query import (
    DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, GuestItemSortField, MenuFilter, MenuQuery,
    PageSpec, SortField, SortOrder, SortSpec,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/menu")
@limiter.limit("60/minute")
def get_guest_menu(
    request: Request,
    scope: GuestScopeDep,
    engine: MenuEngine,
    search: Optional[str] = Query(None, max_length=100),
    category_id: Optional[uuid.UUID] = Query(None, alias="categoryId"),
    chef_recommended: Optional[bool] = Query(None, alias="chefRecommended"),
    sort_by: GuestItemSortField = Query(GuestItemSortField.NAME, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """Available items of the scanned table's restaurant, grouped by category.

    The restaurant comes only from the verified QR token.
    """
    query = MenuQuery(
        filter=MenuFilter(
            search=search,
            category_id=category_id,
            chef_recommended=chef_recommended,
        ),
        sort=SortSpec(field=SortField(sort_by.value), order=sort_order),
        page=PageSpec(page=page, limit=limit),
    )
    return engine.guest_menu(scope.restaurant_id, query)
