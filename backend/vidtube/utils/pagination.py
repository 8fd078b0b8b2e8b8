"""Pagination and sorting helpers for list endpoints"""
import math
from typing import Any, Callable, Dict, Mapping, Optional

from sqlalchemy.orm import Query

from vidtube.core.errors import ValidationError

MAX_PAGE_SIZE = 100


def validate_page_params(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("Page must be 1 or greater!")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}!")


def apply_sort(query: Query, sortable: Mapping[str, Any], sort_by: Optional[str], sort_type: Optional[str], default: str):
    """Order query by a whitelisted field.

    Args:
        sortable: Public field name (camelCase) -> mapped column
        sort_by: Requested field; falls back to default when empty
        sort_type: "asc" or "desc" (default "desc")
    """
    field = sort_by or default
    if field not in sortable:
        raise ValidationError(f"Cannot sort by '{field}'. Allowed: {', '.join(sorted(sortable))}")
    direction = (sort_type or "desc").lower()
    if direction not in ("asc", "desc"):
        raise ValidationError("sortType must be 'asc' or 'desc'!")
    column = sortable[field]
    return query.order_by(column.asc() if direction == "asc" else column.desc())


def paginate(query: Query, page: int, limit: int, serialize: Callable[[Any], Dict]) -> Dict[str, Any]:
    """Run a counted, offset-paginated query and wrap the page"""
    validate_page_params(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "docs": [serialize(item) for item in items],
        "totalDocs": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if total else 0,
    }
