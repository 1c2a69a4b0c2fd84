"""Table QR capability tokens.

A QR token is a signed JWT asserting ``{tableId, restaurantId, iat[, exp]}``.
Whoever holds it may browse that restaurant's menu as a guest of that table.

Verification is stateless: the verifier never reads the database, so the
``qr_token`` column on a table is only a display copy. Regenerating a table's
token does not revoke tokens printed earlier; they stay valid until their
own ``exp``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from urllib.parse import urlencode

import jwt
from sqlalchemy.orm import Session

from smart_restaurant.core.config import QrTokenConfig
from smart_restaurant.core.errors import (
    NotFound, TokenExpired, TokenInvalid, TokenMalformed, TokenSignatureInvalid,
)
from smart_restaurant.db.base import utcnow
from smart_restaurant.models.table import Table

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["tableId", "restaurantId", "iat"]


@dataclass(frozen=True)
class TableScope:
    """What a verified QR token grants access to."""

    restaurant_id: uuid.UUID
    table_id: uuid.UUID
    issued_at: datetime
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class IssuedToken:
    token: str
    table_id: uuid.UUID
    restaurant_id: uuid.UUID
    table_number: str
    issued_at: datetime
    expires_at: Optional[datetime] = None


def build_qr_url(base_url: str, table_id: uuid.UUID, token: str) -> str:
    """Build the URL a guest lands on after scanning a table's QR code."""
    query = urlencode({"table": str(table_id), "token": token})
    return f"{base_url.rstrip('/')}/menu?{query}"


class QrTokenIssuer:
    """Mints QR tokens for tables and stamps the display copy on the row."""

    def __init__(
        self,
        db: Session,
        config: QrTokenConfig,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.config = config
        self.clock = clock

    def sign(self, table: Table, expires_in: Optional[timedelta] = None) -> IssuedToken:
        """Sign a token for ``table`` and stamp it, without committing."""
        ttl = expires_in if expires_in is not None else self.config.expires_in
        issued_at = self.clock().replace(microsecond=0)
        payload = {
            "tableId": str(table.id),
            "restaurantId": str(table.restaurant_id),
            "iat": issued_at,
        }
        expires_at = None
        if ttl is not None:
            expires_at = issued_at + ttl
            payload["exp"] = expires_at

        token = jwt.encode(payload, self.config.secret, algorithm=self.config.algorithm)

        table.qr_token = token
        table.qr_token_created_at = issued_at
        return IssuedToken(
            token=token,
            table_id=table.id,
            restaurant_id=table.restaurant_id,
            table_number=table.table_number,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def issue(
        self,
        table_id: uuid.UUID,
        expires_in: Optional[timedelta] = None,
        restaurant_id: Optional[uuid.UUID] = None,
    ) -> IssuedToken:
        """Issue a token for a table and persist the display copy.

        The restaurant id inside the token always comes from the table row.
        When ``restaurant_id`` is given, tables of other restaurants are
        treated as missing.
        """
        query = self.db.query(Table).filter(Table.id == table_id)
        if restaurant_id is not None:
            query = query.filter(Table.restaurant_id == restaurant_id)
        table = query.first()
        if table is None:
            raise NotFound("Table not found")

        issued = self.sign(table, expires_in)
        self.db.commit()
        logger.info(f"Issued QR token for table {table.id} (restaurant {table.restaurant_id})")
        return issued


class QrTokenVerifier:
    """Checks signature and expiry of QR tokens. Never touches the database."""

    def __init__(self, config: QrTokenConfig) -> None:
        self.config = config

    def verify(self, token: str) -> TableScope:
        """Return the scope embedded in ``token`` or raise ``TokenInvalid``."""
        try:
            payload = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                leeway=self.config.leeway,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise self._reject(TokenExpired(str(e)))
        except jwt.InvalidSignatureError as e:
            raise self._reject(TokenSignatureInvalid(str(e)))
        except jwt.PyJWTError as e:
            raise self._reject(TokenMalformed(str(e)))

        try:
            restaurant_id = uuid.UUID(str(payload["restaurantId"]))
            table_id = uuid.UUID(str(payload["tableId"]))
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = None
            if payload.get("exp") is not None:
                expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (TypeError, ValueError) as e:
            raise self._reject(TokenMalformed(f"bad claim value: {e}"))

        return TableScope(
            restaurant_id=restaurant_id,
            table_id=table_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    @staticmethod
    def _reject(error: TokenInvalid) -> TokenInvalid:
        logger.info(f"QR token rejected ({error.kind}): {error.reason}")
        return error
