"""
Pydantic schemas for the Articles API.

The slug is never accepted from clients; it is derived from the title.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from folio.articles.models import ArticleStatus
from folio.shared.schemas import CamelModel, DbId
from folio.taxonomy.schemas import CategoryResponse, TagResponse
from folio.users.schemas import AuthorSummary


class ArticleCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = None
    category_id: DbId
    tag_ids: list[DbId] = Field(default_factory=list)
    featured: bool = False
    status: ArticleStatus = ArticleStatus.DRAFT
    published_at: Optional[datetime] = None


class ArticleUpdate(CamelModel):
    """Schema for updating an article. All fields optional."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = None
    category_id: Optional[DbId] = None
    tag_ids: Optional[list[DbId]] = None
    featured: Optional[bool] = None
    status: Optional[ArticleStatus] = None
    published_at: Optional[datetime] = None


class ArticleResponse(CamelModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    status: ArticleStatus
    featured: bool
    view_count: int
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_id: int
    category_id: int
    author: AuthorSummary
    category: CategoryResponse
    tags: list[TagResponse] = Field(default_factory=list)
