"""Fold a flat, already ordered page of items back into category groups."""

from typing import Any, Dict, List, Sequence


def group_by_category(items: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Group items under their category.

    Groups appear in the order their first item appears in ``items``, not in
    category display order. Because grouping runs after sorting and paging,
    a category may show up out of its natural position or be split across
    pages. Items keep their relative order inside each group.

    Each item must carry its category as a ``category`` dict with an ``id``.
    The returned groups are ``{**category, "menuItems": [...]}`` and the
    items inside them no longer carry the ``category`` key.
    """
    groups: Dict[str, Dict[str, Any]] = {}
    for item in items:
        category = item["category"]
        group = groups.get(category["id"])
        if group is None:
            group = {**category, "menuItems": []}
            groups[category["id"]] = group
        group["menuItems"].append({k: v for k, v in item.items() if k != "category"})
    return list(groups.values())
