from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")
U = TypeVar("U")


class PaginationResult(BaseModel, Generic[T]):
    """One page of a limit/offset listing."""

    items: list[T] = Field(..., description="Items in this page")
    total: int = Field(..., description="Matching items across all pages", ge=0)
    limit: int = Field(..., description="Maximum items per page", ge=1)
    offset: int = Field(..., description="Number of items skipped", ge=0)

    def map(self, func: Callable[[T], U]) -> "PaginationResult[U]":
        """Same page with every item converted, e.g. domain models to API views."""
        return PaginationResult(
            items=[func(item) for item in self.items], total=self.total, limit=self.limit, offset=self.offset
        )
