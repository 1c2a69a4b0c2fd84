"""Menu query engine.

Listings run as a staged pipeline::

    fetch -> merge popularity (only for popularity sort) -> sort -> paginate -> group

Popularity is computed outside the catalog tables, so ordering and paging
happen in memory after the fetch. Every stage below ``fetch`` is a pure
function that returns a new list and never mutates its input.
"""

from __future__ import annotations

import logging
import unicodedata
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Sequence

from sqlalchemy import distinct, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager, selectinload

from smart_restaurant.core.errors import UpstreamFailure, UpstreamScoringFailure
from smart_restaurant.core.responses import list_response, page_response
from smart_restaurant.models.menu import (
    CategoryStatus, MenuCategory, MenuItem, MenuItemStatus, ModifierGroup,
)
from smart_restaurant.schemas.menu_query import (
    CategoryQuery, MenuFilter, MenuQuery, PageSpec, SortField, SortSpec,
)
from smart_restaurant.services.category_grouper import group_by_category
from smart_restaurant.services.popularity import DEFAULT_DAYS_BACK, PopularityScorer
from smart_restaurant.services.serializers import category_to_dict, menu_item_to_dict

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class Audience(str, Enum):
    GUEST = "guest"
    ADMIN = "admin"


# ---------------------------------------------------------------------------
# Sort keys
# ---------------------------------------------------------------------------

def collation_key(value: str) -> tuple:
    """Accent- and case-insensitive ordering key for display strings."""
    decomposed = unicodedata.normalize("NFKD", value or "")
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), value or "")


def _timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


SORT_KEYS: Dict[SortField, Callable[[Row], Any]] = {
    SortField.NAME: lambda row: collation_key(row["name"]),
    SortField.PRICE: lambda row: row["price"],
    SortField.CREATED_AT: lambda row: _timestamp(row["createdAt"]),
    SortField.POPULARITY: lambda row: row.get("popularity", 0),
    SortField.DISPLAY_ORDER: lambda row: row["displayOrder"],
    SortField.ITEM_COUNT: lambda row: row["itemCount"],
}

# Fields whose asc/desc meaning is flipped. Sorting categories by item count
# "asc" has always returned the fullest categories first; clients rely on it.
INVERTED_FIELDS = frozenset({SortField.ITEM_COUNT})

_missing_keys = set(SortField) - set(SORT_KEYS)
if _missing_keys:
    raise RuntimeError(f"No sort key registered for {sorted(f.value for f in _missing_keys)}")


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------

def merge_popularity(rows: Sequence[Row], scores: Mapping[str, float]) -> List[Row]:
    """Attach ``popularity`` to every row, defaulting to 0."""
    return [{**row, "popularity": scores.get(row["id"], 0)} for row in rows]


def sort_rows(rows: Sequence[Row], sort: SortSpec) -> List[Row]:
    """Total order on ``sort.field``, ties broken by id."""
    key = SORT_KEYS[sort.field]
    descending = sort.descending != (sort.field in INVERTED_FIELDS)
    return sorted(rows, key=lambda row: (key(row), row["id"]), reverse=descending)


def paginate(rows: Sequence[Row], page: PageSpec) -> List[Row]:
    return list(rows[page.offset:page.offset + page.limit])


def _like_pattern(search: str) -> str:
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class MenuQueryEngine:
    """Runs guest and admin menu listings for one restaurant at a time.

    The popularity scorer is consulted only when the listing is sorted by
    ``popularity``. Other sorts never call it, so a broken scorer fails
    popularity-sorted requests (``UpstreamScoringFailure``) and leaves every
    other listing untouched. Scoring on every guest request, whatever the
    sort, is the older behaviour this replaces.
    """

    def __init__(
        self,
        db: Session,
        scorer: PopularityScorer,
        days_back: int = DEFAULT_DAYS_BACK,
    ) -> None:
        self.db = db
        self.scorer = scorer
        self.days_back = days_back

    # ------------------------------------------------------------------
    # Item listings
    # ------------------------------------------------------------------

    def guest_menu(self, restaurant_id: uuid.UUID, query: MenuQuery) -> dict:
        """Items a guest may order, grouped by category."""
        return self.run(restaurant_id, query, Audience.GUEST)

    def admin_items(self, restaurant_id: uuid.UUID, query: MenuQuery) -> dict:
        """Every non-deleted item, grouped by category."""
        return self.run(restaurant_id, query, Audience.ADMIN)

    def run(self, restaurant_id: uuid.UUID, query: MenuQuery, audience: Audience) -> dict:
        rows = self.fetch(restaurant_id, query.filter, audience)
        total = self.count(restaurant_id, query.filter, audience)

        if query.sort.field == SortField.POPULARITY:
            rows = merge_popularity(rows, self._scores(restaurant_id))

        rows = sort_rows(rows, query.sort)
        rows = paginate(rows, query.page)
        return page_response(
            group_by_category(rows),
            total=total,
            page=query.page.page,
            limit=query.page.limit,
        )

    def _filters(self, restaurant_id: uuid.UUID, filt: MenuFilter, audience: Audience) -> list:
        conditions = [
            MenuItem.restaurant_id == restaurant_id,
            MenuCategory.restaurant_id == restaurant_id,
            MenuItem.not_deleted(),
        ]
        if audience == Audience.GUEST:
            conditions.append(MenuCategory.status == CategoryStatus.ACTIVE)
            conditions.append(MenuItem.status == MenuItemStatus.AVAILABLE)
        elif filt.status is not None:
            conditions.append(MenuItem.status == filt.status)

        if filt.search:
            conditions.append(MenuItem.name.ilike(_like_pattern(filt.search.strip()), escape="\\"))
        if filt.category_id is not None:
            conditions.append(MenuItem.category_id == filt.category_id)
        if filt.chef_recommended:
            conditions.append(MenuItem.is_chef_recommended.is_(True))
        return conditions

    def fetch(self, restaurant_id: uuid.UUID, filt: MenuFilter, audience: Audience) -> List[Row]:
        """Load every matching item as a serialized row, unordered."""
        try:
            items = (
                self.db.query(MenuItem)
                .join(MenuItem.category)
                .options(
                    contains_eager(MenuItem.category),
                    selectinload(MenuItem.photos),
                    selectinload(MenuItem.modifier_groups).selectinload(ModifierGroup.options),
                )
                .filter(*self._filters(restaurant_id, filt, audience))
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Menu fetch failed for restaurant {restaurant_id}: {e}")
            raise UpstreamFailure() from e
        guest = audience == Audience.GUEST
        return [menu_item_to_dict(item, guest=guest) for item in items]

    def count(self, restaurant_id: uuid.UUID, filt: MenuFilter, audience: Audience) -> int:
        try:
            return (
                self.db.query(func.count(distinct(MenuItem.id)))
                .select_from(MenuItem)
                .join(MenuItem.category)
                .filter(*self._filters(restaurant_id, filt, audience))
                .scalar()
            ) or 0
        except SQLAlchemyError as e:
            logger.error(f"Menu count failed for restaurant {restaurant_id}: {e}")
            raise UpstreamFailure() from e

    def _scores(self, restaurant_id: uuid.UUID) -> Mapping[str, float]:
        """Call the scorer. Any failure aborts the whole listing."""
        try:
            return self.scorer.scores(restaurant_id, self.days_back)
        except UpstreamScoringFailure:
            raise
        except Exception as e:
            logger.error(f"Popularity scoring failed for restaurant {restaurant_id}: {e}")
            raise UpstreamScoringFailure() from e

    # ------------------------------------------------------------------
    # Category listing
    # ------------------------------------------------------------------

    def list_categories(self, restaurant_id: uuid.UUID, query: CategoryQuery) -> dict:
        """Categories with their non-deleted item counts.

        Sorting by ``itemCount`` uses the inverted direction of ``INVERTED_FIELDS``.
        """
        counts = (
            self.db.query(
                MenuItem.category_id.label("category_id"),
                func.count(MenuItem.id).label("item_count"),
            )
            .filter(MenuItem.not_deleted())
            .group_by(MenuItem.category_id)
            .subquery()
        )
        q = (
            self.db.query(MenuCategory, func.coalesce(counts.c.item_count, 0))
            .outerjoin(counts, counts.c.category_id == MenuCategory.id)
            .filter(MenuCategory.restaurant_id == restaurant_id)
        )
        if query.search:
            q = q.filter(MenuCategory.name.ilike(_like_pattern(query.search.strip()), escape="\\"))
        if query.status is not None:
            q = q.filter(MenuCategory.status == query.status)

        try:
            results = q.all()
        except SQLAlchemyError as e:
            logger.error(f"Category listing failed for restaurant {restaurant_id}: {e}")
            raise UpstreamFailure() from e

        rows = [
            {**category_to_dict(category), "itemCount": int(item_count)}
            for category, item_count in results
        ]
        return list_response(sort_rows(rows, query.sort))
