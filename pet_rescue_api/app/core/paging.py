"""
Pagination over a ``SelectQuery``.

``paginate`` counts the whole filtered collection, then fetches a
single page of it.  A page number past the last page is not an error:
it returns no items together with the correct totals.
"""

from __future__ import annotations

import math
import sqlite3
from dataclasses import dataclass, field
from typing import Callable, Generic, List, TypeVar

from .query import SelectQuery

T = TypeVar("T")


@dataclass
class PaginatedList(Generic[T]):
    items: List[T] = field(default_factory=list)
    page_number: int = 1
    total_pages: int = 0
    total_count: int = 0

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages


def paginate(
    conn: sqlite3.Connection,
    query: SelectQuery,
    page_number: int,
    page_size: int,
    mapper: Callable[[sqlite3.Row], T],
) -> PaginatedList[T]:
    """Run ``query`` and return page ``page_number`` of size ``page_size``.

    Parameters
    ----------
    conn : sqlite3.Connection
        Open connection; it is not committed or closed.
    query : SelectQuery
        Filtered and ordered query.  Its ordering decides what ends up on
        each page.
    page_number : int
        1-based page index.
    page_size : int
        Maximum number of items per page.
    mapper : Callable
        Converts a result row into the item type.
    """
    if page_number < 1:
        raise ValueError("page_number must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    count_sql, count_params = query.count_sql()
    total_count = conn.execute(count_sql, tuple(count_params)).fetchone()[0]

    sql, params = query.to_sql(limit=page_size, offset=(page_number - 1) * page_size)
    rows = conn.execute(sql, tuple(params)).fetchall()

    return PaginatedList(
        items=[mapper(row) for row in rows],
        page_number=page_number,
        total_pages=math.ceil(total_count / page_size),
        total_count=total_count,
    )
