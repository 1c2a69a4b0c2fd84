"""Request bodies for catalog management.

Bodies accept camelCase or snake_case keys.
"""

import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from smart_restaurant.core.sanitize import sanitize_text
from smart_restaurant.models.menu import (
    CategoryStatus, MenuItemStatus, ModifierSelectionType, ModifierStatus,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _clean_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


# ============== Categories ==============

class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    display_order: int = Field(0, ge=0)
    status: CategoryStatus = CategoryStatus.ACTIVE

    @field_validator("name")
    @classmethod
    def _clean(cls, v):
        return _clean_name(v)

    @field_validator("description")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    display_order: Optional[int] = Field(None, ge=0)
    status: Optional[CategoryStatus] = None

    @field_validator("name")
    @classmethod
    def _clean(cls, v):
        return _clean_name(v)

    @field_validator("description")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class CategoryStatusUpdate(CamelModel):
    status: CategoryStatus


# ============== Items ==============

class MenuItemCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=80)
    description: Optional[str] = Field(None, max_length=1000)
    category_id: uuid.UUID
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    prep_time_minutes: int = Field(0, ge=0, le=240)
    status: MenuItemStatus = MenuItemStatus.AVAILABLE
    is_chef_recommended: bool = False

    @field_validator("name")
    @classmethod
    def _clean(cls, v):
        return _clean_name(v)

    @field_validator("description")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class MenuItemUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=80)
    description: Optional[str] = Field(None, max_length=1000)
    category_id: Optional[uuid.UUID] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    prep_time_minutes: Optional[int] = Field(None, ge=0, le=240)
    status: Optional[MenuItemStatus] = None
    is_chef_recommended: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def _clean(cls, v):
        return _clean_name(v)

    @field_validator("description")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class PhotoCreate(CamelModel):
    url: str = Field(..., min_length=1, max_length=500)
    storage_key: Optional[str] = Field(None, max_length=500)


class PhotoBatchCreate(CamelModel):
    photos: List[PhotoCreate] = Field(..., min_length=1, max_length=10)


class AttachModifierGroups(CamelModel):
    group_ids: List[uuid.UUID] = Field(default_factory=list)


# ============== Modifiers ==============

class ModifierOptionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=80)
    price_adjustment: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    status: ModifierStatus = ModifierStatus.ACTIVE


class ModifierOptionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=80)
    price_adjustment: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    status: Optional[ModifierStatus] = None


class ModifierGroupCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=80)
    selection_type: ModifierSelectionType = ModifierSelectionType.SINGLE
    is_required: bool = False
    min_selections: int = Field(0, ge=0)
    max_selections: int = Field(1, ge=0)
    display_order: int = Field(0, ge=0)
    status: ModifierStatus = ModifierStatus.ACTIVE
    options: List[ModifierOptionCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_selections(self) -> "ModifierGroupCreate":
        if self.max_selections < self.min_selections:
            raise ValueError("maxSelections must be greater than or equal to minSelections")
        return self


class ModifierGroupUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=80)
    selection_type: Optional[ModifierSelectionType] = None
    is_required: Optional[bool] = None
    min_selections: Optional[int] = Field(None, ge=0)
    max_selections: Optional[int] = Field(None, ge=0)
    display_order: Optional[int] = Field(None, ge=0)
    status: Optional[ModifierStatus] = None
