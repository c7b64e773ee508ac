"""Pagination with filter-preserving page links."""

from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Query


def active_filters(filters: Dict[str, Any]) -> Dict[str, Any]:
    """Drop filters that were not supplied."""
    return {k: v for k, v in filters.items() if v not in (None, "")}


def page_link(base_path: str, filters: Dict[str, Any], page: int, page_size: int) -> str:
    params = dict(active_filters(filters))
    params["page"] = page
    params["page_size"] = page_size
    return f"{base_path}?{urlencode(params)}"


def paginate(
    query: Query,
    page: int,
    page_size: int,
    filters: Dict[str, Any],
    base_path: str,
    transform: Optional[Callable[[Any], Any]] = None,
) -> Dict[str, Any]:
    """Run ``query`` for one page.

    Returns ``items``, ``total``, ``page``, ``page_size``, ``total_pages``,
    ``filters`` (the applied filters echoed back) and ``links``. Every link
    carries the applied filters.
    """
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    total_pages = max((total + page_size - 1) // page_size, 1)
    echoed = active_filters(filters)

    links = {
        "first": page_link(base_path, echoed, 1, page_size),
        "last": page_link(base_path, echoed, total_pages, page_size),
        "prev": page_link(base_path, echoed, page - 1, page_size) if page > 1 else None,
        "next": page_link(base_path, echoed, page + 1, page_size) if page < total_pages else None,
    }

    return {
        "items": [transform(r) for r in rows] if transform else rows,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "filters": echoed,
        "links": links,
    }
