"""Standardized API response helpers.

Plain list endpoints return ``{"items": [...], "total": <int>}``.
Paged menu listings return ``{"items": [...], "pagination": {...}}``.
"""

import math
from typing import Optional


def list_response(
    items: list,
    total: Optional[int] = None,
) -> dict:
    """Wrap a list in the standard envelope."""
    return {
        "items": items,
        "total": total if total is not None else len(items),
    }


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def page_response(items: list, total: int, page: int, limit: int) -> dict:
    """Wrap one page of results with its pagination block.

    Returns:
        {"items": items, "pagination": {"page", "limit", "total", "totalPages"}}
    """
    return {
        "items": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages(total, limit),
        },
    }
