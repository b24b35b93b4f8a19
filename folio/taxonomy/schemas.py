"""Pydantic schemas for categories, tags and technologies."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from folio.shared.schemas import CamelModel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: Optional[datetime] = None


class TagCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120, pattern=SLUG_PATTERN)


class TagResponse(CamelModel):
    id: int
    name: str
    slug: str


class TechnologyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120, pattern=SLUG_PATTERN)
    icon: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, max_length=20)


class TechnologyResponse(CamelModel):
    id: int
    name: str
    slug: str
    icon: Optional[str] = None
    color: Optional[str] = None
