"""
Offset pagination shared by every list operation.

WHY OFFSET AND NOT CURSOR:
--------------------------
Clients address pages by number (page=2&limit=10) and need a total for
"page X of Y" rendering. Cursor pagination can't jump to a page or give
a total, so lists here use COUNT + LIMIT/OFFSET.

Trade-off: OFFSET scans skipped rows, fine at social-app page depths.
"""

import math
from typing import Any, List, TypedDict

from django.db.models import QuerySet

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_REPLY_LIMIT = 5
MAX_LIMIT = 100


class Page(TypedDict):
    """Response envelope for list operations."""
    items: List[Any]
    total: int
    page: int
    limit: int
    total_pages: int


def paginate(queryset: QuerySet, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Page:
    """
    Slice an ordered queryset into one page.

    Queries: 2 (COUNT, then SELECT ... LIMIT/OFFSET)
    """
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive integers")

    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])

    return build_page(items, total, page, limit)


def build_page(items: list, total: int, page: int, limit: int) -> Page:
    return {
        'items': items,
        'total': total,
        'page': page,
        'limit': limit,
        'total_pages': math.ceil(total / limit) if limit else 0,
    }
