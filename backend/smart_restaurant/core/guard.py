"""Request guard for guest endpoints gated by a table QR token.

The token travels in the ``token`` query parameter of the scanned URL. The
guard runs before any catalog logic: it verifies the token and stores the
resolved scope on ``request.state.qr_scope``. Handlers must take the
restaurant id from that scope and nowhere else.
"""

import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from smart_restaurant.core.config import get_qr_token_config
from smart_restaurant.core.errors import TokenMissing
from smart_restaurant.core.qr_token import QrTokenVerifier

logger = logging.getLogger(__name__)

TOKEN_QUERY_PARAM = "token"


@dataclass(frozen=True)
class GuestScope:
    restaurant_id: uuid.UUID
    table_id: uuid.UUID
    raw_token: str


class QrTokenGuard:
    """Resolve a ``GuestScope`` from the request or reject it.

    Can be called directly with a constructed ``Request`` in tests.
    """

    def __init__(self, verifier: QrTokenVerifier) -> None:
        self.verifier = verifier

    async def __call__(self, request: Request) -> GuestScope:
        token = (request.query_params.get(TOKEN_QUERY_PARAM) or "").strip()
        if not token:
            raise TokenMissing()

        table_scope = self.verifier.verify(token)
        scope = GuestScope(
            restaurant_id=table_scope.restaurant_id,
            table_id=table_scope.table_id,
            raw_token=token,
        )
        request.state.qr_scope = scope
        logger.debug(f"Guest scope resolved: restaurant={scope.restaurant_id} table={scope.table_id}")
        return scope


@lru_cache
def get_qr_token_guard() -> QrTokenGuard:
    """Process-wide guard bound to the process-wide QR token config."""
    return QrTokenGuard(QrTokenVerifier(get_qr_token_config()))


async def require_guest_scope(
    request: Request,
    guard: Annotated[QrTokenGuard, Depends(get_qr_token_guard)],
) -> GuestScope:
    return await guard(request)


GuestScopeDep = Annotated[GuestScope, Depends(require_guest_scope)]
