"""Popularity scoring for menu items.

A score is the number of units ordered over a trailing window. Scores are
computed per query and never stored.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smart_restaurant.core.errors import UpstreamScoringFailure
from smart_restaurant.db.base import utcnow
from smart_restaurant.models.order import Order, OrderItem, OrderItemStatus, OrderStatus

logger = logging.getLogger(__name__)

DEFAULT_DAYS_BACK = 30


class PopularityScorer(Protocol):
    """Anything that can rank a restaurant's menu items."""

    def scores(self, restaurant_id: uuid.UUID, days_back: int = DEFAULT_DAYS_BACK) -> Dict[str, float]:
        """Return ``{menu item id (str): score}``. Missing items score 0."""
        ...


class SqlPopularityScorer:
    """Scores items by summed order quantity in the database."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self.clock = clock

    def scores(self, restaurant_id: uuid.UUID, days_back: int = DEFAULT_DAYS_BACK) -> Dict[str, float]:
        since = self.clock() - timedelta(days=days_back)
        try:
            rows = (
                self.db.query(OrderItem.menu_item_id, func.sum(OrderItem.quantity))
                .join(Order, Order.id == OrderItem.order_id)
                .filter(
                    Order.restaurant_id == restaurant_id,
                    Order.created_at >= since,
                    Order.status != OrderStatus.CANCELLED,
                    OrderItem.status != OrderItemStatus.REJECTED,
                )
                .group_by(OrderItem.menu_item_id)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Popularity query failed for restaurant {restaurant_id}: {e}")
            raise UpstreamScoringFailure() from e

        return {str(item_id): float(total or 0) for item_id, total in rows}
