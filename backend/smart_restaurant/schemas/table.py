"""Request bodies for table management."""

from typing import Optional

from pydantic import Field, field_validator

from smart_restaurant.core.sanitize import sanitize_text
from smart_restaurant.models.table import TableStatus
from smart_restaurant.schemas.catalog import CamelModel


class TableCreate(CamelModel):
    table_number: str = Field(..., min_length=1, max_length=50)
    capacity: int = Field(4, ge=1, le=20)
    location: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: TableStatus = TableStatus.AVAILABLE

    @field_validator("table_number", "location")
    @classmethod
    def _strip(cls, v):
        return v.strip() if v is not None else v

    @field_validator("description")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class TableUpdate(CamelModel):
    """Status changes go through the status endpoint."""

    table_number: Optional[str] = Field(None, min_length=1, max_length=50)
    capacity: Optional[int] = Field(None, ge=1, le=20)
    location: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("table_number", "location")
    @classmethod
    def _strip(cls, v):
        return v.strip() if v is not None else v

    @field_validator("description")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class TableStatusUpdate(CamelModel):
    status: TableStatus
