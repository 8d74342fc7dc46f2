from typing import Optional

from pydantic import BaseModel

from constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class Pagination(BaseModel):
    """Pagination block returned alongside list payloads"""
    page: int
    limit: int
    total: int
    pages: int


def get_pagination_params(page: Optional[int] = None, limit: Optional[int] = None) -> tuple[int, int]:
    """
    Get pagination parameters with defaults and validation.

    Args:
        page: Page number (1-indexed)
        limit: Number of items per page

    Returns:
        Tuple of (skip, limit) for MongoDB queries
    """
    page = page if page is not None and page > 0 else DEFAULT_PAGE
    limit = limit if limit is not None and limit > 0 else DEFAULT_PAGE_SIZE

    # Enforce maximum page size
    if limit > MAX_PAGE_SIZE:
        limit = MAX_PAGE_SIZE

    skip = (page - 1) * limit

    return skip, limit


def create_pagination(total: int, page: int, limit: int) -> Pagination:
    """
    Build the pagination block for a list response.

    Args:
        total: Total number of matching items
        page: Current page number
        limit: Items per page

    Returns:
        Pagination object with the computed page count
    """
    pages = (total + limit - 1) // limit if total > 0 else 0

    return Pagination(page=page, limit=limit, total=total, pages=pages)
