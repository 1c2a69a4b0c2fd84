"""Table management and QR code lifecycle."""

from __future__ import annotations

import io
import logging
import re
import uuid
import zipfile
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from smart_restaurant.core.db_errors import translate_db_errors
from smart_restaurant.core.errors import BadRequest, Conflict, NotFound
from smart_restaurant.core.qr_token import IssuedToken, QrTokenIssuer, build_qr_url
from smart_restaurant.core.responses import list_response
from smart_restaurant.models.order import OPEN_ORDER_STATUSES, Order
from smart_restaurant.models.table import Table, TableStatus
from smart_restaurant.schemas.table import TableCreate, TableUpdate
from smart_restaurant.services.catalog_service import apply_changes
from smart_restaurant.services.qr_image import (
    PNG_MEDIA_TYPE, SVG_MEDIA_TYPE, render_png, render_svg,
)
from smart_restaurant.services.serializers import iso, table_to_dict

logger = logging.getLogger(__name__)

DUPLICATE_TABLE_MESSAGE = "Table number already exists"

TABLE_SORT_COLUMNS = {
    "tableNumber": Table.table_number,
    "capacity": Table.capacity,
    "createdAt": Table.created_at,
}


def _safe_filename(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", value).strip("_") or "table"


class TableService:
    """Tables of one restaurant, including QR token issuance."""

    def __init__(
        self,
        db: Session,
        restaurant_id: uuid.UUID,
        issuer: QrTokenIssuer,
        guest_menu_base_url: str,
    ) -> None:
        self.db = db
        self.restaurant_id = restaurant_id
        self.issuer = issuer
        self.guest_menu_base_url = guest_menu_base_url

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_model(self, table_id: uuid.UUID) -> Table:
        table = self.db.query(Table).filter(
            Table.id == table_id,
            Table.restaurant_id == self.restaurant_id,
        ).first()
        if table is None:
            raise NotFound("Table not found")
        return table

    def _number_taken(self, table_number: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        query = self.db.query(Table.id).filter(
            Table.restaurant_id == self.restaurant_id,
            Table.table_number == table_number,
        )
        if exclude_id is not None:
            query = query.filter(Table.id != exclude_id)
        return query.first() is not None

    def active_order_count(self, table_id: uuid.UUID) -> int:
        return self.db.query(func.count(Order.id)).filter(
            Order.table_id == table_id,
            Order.status.in_(OPEN_ORDER_STATUSES),
        ).scalar() or 0

    def qr_payload(self, issued: IssuedToken) -> Dict[str, Any]:
        return {
            "tableId": str(issued.table_id),
            "tableNumber": issued.table_number,
            "token": issued.token,
            "qrUrl": build_qr_url(self.guest_menu_base_url, issued.table_id, issued.token),
            "issuedAt": iso(issued.issued_at),
            "expiresAt": iso(issued.expires_at),
        }

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, data: TableCreate) -> Dict[str, Any]:
        """Create a table and mint its first QR token."""
        if self._number_taken(data.table_number):
            raise Conflict(DUPLICATE_TABLE_MESSAGE)

        table = Table(restaurant_id=self.restaurant_id)
        apply_changes(table, data.model_dump())
        with translate_db_errors(self.db, DUPLICATE_TABLE_MESSAGE):
            self.db.add(table)
            self.db.flush()
            issued = self.issuer.sign(table)
            self.db.commit()
        self.db.refresh(table)
        logger.info(f"Created table {table.table_number} ({table.id}) for restaurant {self.restaurant_id}")
        return {**table_to_dict(table), "qrUrl": self.qr_payload(issued)["qrUrl"]}

    def list_tables(
        self,
        status: Optional[TableStatus] = None,
        location: Optional[str] = None,
        sort_by: str = "tableNumber",
        sort_order: str = "asc",
    ) -> Dict[str, Any]:
        """List tables. Tokens are never included in list output."""
        query = self.db.query(Table).filter(Table.restaurant_id == self.restaurant_id)
        if status is not None:
            query = query.filter(Table.status == status)
        if location:
            query = query.filter(Table.location == location)

        column = TABLE_SORT_COLUMNS[sort_by]
        query = query.order_by(column.desc() if sort_order == "desc" else column.asc(), Table.id)
        tables = query.all()
        return list_response([table_to_dict(t, include_token=False) for t in tables])

    def locations(self) -> List[str]:
        rows = self.db.query(Table.location).filter(
            Table.restaurant_id == self.restaurant_id,
            Table.location.isnot(None),
            Table.location != "",
        ).distinct().order_by(Table.location).all()
        return [location for (location,) in rows]

    def get(self, table_id: uuid.UUID) -> Dict[str, Any]:
        table = self.get_model(table_id)
        active_orders = self.active_order_count(table.id)
        return {
            **table_to_dict(table),
            "hasActiveOrders": active_orders > 0,
            "activeOrderCount": active_orders,
        }

    def update(self, table_id: uuid.UUID, data: TableUpdate) -> Dict[str, Any]:
        table = self.get_model(table_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("table_number") and self._number_taken(changes["table_number"], exclude_id=table.id):
            raise Conflict(DUPLICATE_TABLE_MESSAGE)
        apply_changes(table, {
            k: v for k, v in changes.items()
            if v is not None or k in ("location", "description")
        })
        with translate_db_errors(self.db, DUPLICATE_TABLE_MESSAGE):
            self.db.commit()
        self.db.refresh(table)
        return table_to_dict(table)

    def set_status(self, table_id: uuid.UUID, status: TableStatus) -> Dict[str, Any]:
        """Change table status. Deactivation is refused while orders are open."""
        table = self.get_model(table_id)
        if status == TableStatus.INACTIVE:
            active_orders = self.active_order_count(table.id)
            if active_orders:
                raise BadRequest(
                    f"Cannot deactivate table with {active_orders} active order(s)",
                    activeOrderCount=active_orders,
                )
        table.status = status
        with translate_db_errors(self.db):
            self.db.commit()
        self.db.refresh(table)
        logger.info(f"Table {table.id} status set to {status.value}")
        return table_to_dict(table)

    # ------------------------------------------------------------------
    # QR codes
    # ------------------------------------------------------------------

    def regenerate(self, table_id: uuid.UUID) -> Dict[str, Any]:
        """Mint a new token. Tokens handed out earlier stay valid until they expire."""
        issued = self.issuer.issue(table_id, restaurant_id=self.restaurant_id)
        return self.qr_payload(issued)

    def regenerate_all(self) -> Dict[str, Any]:
        tables = self.db.query(Table).filter(
            Table.restaurant_id == self.restaurant_id,
        ).order_by(Table.table_number).all()
        results = [self.qr_payload(self.issuer.sign(table)) for table in tables]
        with translate_db_errors(self.db):
            self.db.commit()
        logger.info(f"Regenerated {len(results)} QR token(s) for restaurant {self.restaurant_id}")
        return {"count": len(results), "tables": results}

    def qr_image(self, table_id: uuid.UUID, fmt: str = "png") -> Tuple[bytes, str, str]:
        """Render the table's current QR URL. Returns (content, media type, filename)."""
        table = self.get_model(table_id)
        if not table.qr_token:
            raise BadRequest("QR code has not been generated for this table")
        url = build_qr_url(self.guest_menu_base_url, table.id, table.qr_token)
        name = f"table-{_safe_filename(table.table_number)}-qr"
        if fmt == "svg":
            return render_svg(url), SVG_MEDIA_TYPE, f"{name}.svg"
        return render_png(url), PNG_MEDIA_TYPE, f"{name}.png"

    def qr_archive(self) -> bytes:
        """ZIP of PNG QR codes for every table that has a token."""
        tables = self.db.query(Table).filter(
            Table.restaurant_id == self.restaurant_id,
            Table.qr_token.isnot(None),
        ).order_by(Table.table_number).all()
        if not tables:
            raise NotFound("No tables with QR codes found")

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for table in tables:
                url = build_qr_url(self.guest_menu_base_url, table.id, table.qr_token)
                archive.writestr(f"table-{_safe_filename(table.table_number)}-qr.png", render_png(url))
        return buffer.getvalue()
