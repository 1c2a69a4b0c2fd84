"""Table management routes - CRUD, status and QR codes."""

import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Query, Response, status

from smart_restaurant.api.deps import TokenIssuer
from smart_restaurant.core.config import settings
from smart_restaurant.core.rbac import RestaurantId
from smart_restaurant.db.session import DbSession
from smart_restaurant.models.table import TableStatus
from smart_restaurant.schemas.table import TableCreate, TableStatusUpdate, TableUpdate
from smart_restaurant.services.table_service import TableService

router = APIRouter()

NO_STORE = {"Cache-Control": "no-store"}


def _service(db, restaurant_id: uuid.UUID, issuer) -> TableService:
    return TableService(db, restaurant_id, issuer, settings.guest_menu_base_url)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_table(restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer, body: TableCreate):
    """Create a table and issue its first QR token."""
    return _service(db, restaurant_id, issuer).create(body)


@router.get("")
def list_tables(
    response: Response,
    restaurant_id: RestaurantId,
    db: DbSession,
    issuer: TokenIssuer,
    table_status: Optional[TableStatus] = Query(None, alias="status"),
    location: Optional[str] = Query(None, max_length=100),
    sort_by: Literal["tableNumber", "capacity", "createdAt"] = Query("tableNumber", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
):
    response.headers["Cache-Control"] = "no-store"
    return _service(db, restaurant_id, issuer).list_tables(
        status=table_status, location=location, sort_by=sort_by, sort_order=sort_order,
    )


@router.get("/locations")
def list_locations(restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer):
    return {"locations": _service(db, restaurant_id, issuer).locations()}


@router.get("/qr/download-all")
def download_all_qr_codes(restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer):
    """ZIP archive with one PNG QR code per table."""
    content = _service(db, restaurant_id, issuer).qr_archive()
    return Response(
        content=content,
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="table-qr-codes.zip"', **NO_STORE},
    )


@router.post("/qr/regenerate-all")
def regenerate_all_qr_codes(restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer):
    """Issue fresh tokens for every table. Earlier tokens remain valid until they expire."""
    return _service(db, restaurant_id, issuer).regenerate_all()


@router.get("/{table_id}")
def get_table(
    response: Response, restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer,
    table_id: uuid.UUID,
):
    response.headers["Cache-Control"] = "no-store"
    return _service(db, restaurant_id, issuer).get(table_id)


@router.put("/{table_id}")
def update_table(
    restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer,
    table_id: uuid.UUID, body: TableUpdate,
):
    return _service(db, restaurant_id, issuer).update(table_id, body)


@router.patch("/{table_id}/status")
def update_table_status(
    restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer,
    table_id: uuid.UUID, body: TableStatusUpdate,
):
    return _service(db, restaurant_id, issuer).set_status(table_id, body.status)


@router.post("/{table_id}/qr/generate")
def generate_qr_code(restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer, table_id: uuid.UUID):
    """Regenerate the table's QR token and return the scannable URL."""
    return _service(db, restaurant_id, issuer).regenerate(table_id)


@router.get("/{table_id}/qr/download")
def download_qr_code(
    restaurant_id: RestaurantId, db: DbSession, issuer: TokenIssuer, table_id: uuid.UUID,
    fmt: Literal["png", "svg"] = Query("png", alias="format"),
):
    content, media_type, filename = _service(db, restaurant_id, issuer).qr_image(table_id, fmt)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"', **NO_STORE},
    )
