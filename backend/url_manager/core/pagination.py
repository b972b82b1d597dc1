"""Pagination utilities for database queries."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select


async def paginate_query(
    db: AsyncSession,
    base_query: Select,
    page: int,
    page_size: int,
    *,
    order_by: list[Any] | None = None,
) -> tuple[list[Any], int]:
    """Execute a paginated query.

    Args:
        db: Database session
        base_query: Base SELECT query with filters applied
        page: Page number (1-indexed)
        page_size: Number of items per page (max 100 enforced)
        order_by: List of order_by clauses

    Returns:
        Tuple of (items_list, total_count)
    """
    page_size = min(page_size, 100)
    page = max(page, 1)

    count_stmt = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    stmt = base_query
    if order_by:
        stmt = stmt.order_by(*order_by)

    stmt = stmt.offset((page - 1) * page_size).limit(page_size)

    result = await db.execute(stmt)
    items = list(result.scalars().all())

    return items, total
