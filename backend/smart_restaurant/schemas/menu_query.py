"""Filter, sort and paging parameters for menu listings."""

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from smart_restaurant.models.menu import CategoryStatus, MenuItemStatus

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


class SortField(str, Enum):
    """Every field a menu listing can be ordered by."""

    NAME = "name"
    PRICE = "price"
    CREATED_AT = "createdAt"
    POPULARITY = "popularity"
    DISPLAY_ORDER = "displayOrder"
    ITEM_COUNT = "itemCount"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class GuestItemSortField(str, Enum):
    NAME = SortField.NAME.value
    PRICE = SortField.PRICE.value
    POPULARITY = SortField.POPULARITY.value


class AdminItemSortField(str, Enum):
    NAME = SortField.NAME.value
    PRICE = SortField.PRICE.value
    CREATED_AT = SortField.CREATED_AT.value
    POPULARITY = SortField.POPULARITY.value


class CategorySortField(str, Enum):
    DISPLAY_ORDER = SortField.DISPLAY_ORDER.value
    NAME = SortField.NAME.value
    CREATED_AT = SortField.CREATED_AT.value
    ITEM_COUNT = SortField.ITEM_COUNT.value


class MenuFilter(BaseModel):
    """Relationally expressible filters."""

    model_config = ConfigDict(frozen=True)

    search: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    chef_recommended: Optional[bool] = None
    status: Optional[MenuItemStatus] = None


class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: SortField = SortField.NAME
    order: SortOrder = SortOrder.ASC

    @property
    def descending(self) -> bool:
        return self.order == SortOrder.DESC


class PageSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class MenuQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    filter: MenuFilter = MenuFilter()
    sort: SortSpec = SortSpec()
    page: PageSpec = PageSpec()


class CategoryQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: Optional[str] = None
    status: Optional[CategoryStatus] = None
    sort: SortSpec = SortSpec(field=SortField.DISPLAY_ORDER)
