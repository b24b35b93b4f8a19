"""
Response envelope and shared pydantic helpers.

Every endpoint answers with {success, data?, error?, message?, pagination?}.
JSON keys are camelCase; request bodies accept either casing.
"""
import math
from typing import Annotated, Generic, Optional, TypeVar

from fastapi import HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema that reads ORM objects and speaks camelCase."""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class PaginatedResponse(CamelModel, Generic[T]):
    success: bool = True
    data: list[T] = Field(default_factory=list)
    pagination: Pagination


class PageParams:
    """Query dependency for offset pagination (page is 1-based)."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# Upper bound of a 32-bit signed INTEGER primary key
MAX_DB_ID = 2**31 - 1

# Request-body id that is guaranteed to fit the key column
DbId = Annotated[int, Field(ge=1, le=MAX_DB_ID)]


def to_db_id(raw: str) -> Optional[int]:
    """
    Parse an ASCII-digit string into an id the database can hold.

    Returns None for anything else, including digits such as "²" that
    str.isdigit() accepts and out-of-range values.
    """
    if not (raw.isascii() and raw.isdigit()):
        return None
    value = int(raw)
    return value if value <= MAX_DB_ID else None


def parse_id(raw: str, entity: str) -> int:
    """Parse a numeric path id, raising 400 "Invalid <entity> ID" otherwise."""
    value = to_db_id(raw)
    if value is None:
        raise HTTPException(status_code=400, detail=f"Invalid {entity} ID")
    return value
