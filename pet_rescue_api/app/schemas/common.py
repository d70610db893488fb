"""
Shared schema building blocks.

``ApiModel`` serializes field names in camelCase (``pageNumber``,
``startDate``), which is the wire format of the JSON API; requests are
accepted in either camelCase or snake_case.  ``Page`` is the response
envelope for every paginated listing.
"""

from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, computed_field
from pydantic.alias_generators import to_camel

from ..core.paging import PaginatedList

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class Page(ApiModel, Generic[T]):
    """One page of a listing together with its totals."""

    items: List[T]
    page_number: int
    total_pages: int
    total_count: int

    @computed_field(alias="hasPreviousPage")
    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @computed_field(alias="hasNextPage")
    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages

    @classmethod
    def from_list(cls, page: PaginatedList, **extra) -> "Page":
        return cls(
            items=page.items,
            page_number=page.page_number,
            total_pages=page.total_pages,
            total_count=page.total_count,
            **extra,
        )


class AdminPage(Page[T], Generic[T]):
    """Listing page for the admin screens.

    ``next_sort`` maps every sortable column to the ``sortOrder`` value a
    click on that column header should request (``None`` returns to the
    default order).
    """

    sort_order: Optional[str] = None
    next_sort: Dict[str, Optional[str]] = Field(default_factory=dict)
