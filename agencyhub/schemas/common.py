"""
Shared Schemas

Pagination envelope shared by the list endpoints.
"""
from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Paginated list of records."""
    items: List[T]
    total: int
    page: int
    page_size: int
