"""
Shared schema pieces: identifier format and pagination envelope.
"""
from pydantic import BaseModel
from typing import Generic, List, TypeVar

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

T = TypeVar("T")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedResponse(BaseModel, Generic[T]):
    """List response with pagination metadata."""
    data: List[T]
    pagination: Pagination
