"""Pydantic schemas for article comments."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from folio.shared.schemas import CamelModel
from folio.users.schemas import AuthorSummary


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(CamelModel):
    id: int
    content: str
    approved: bool
    article_id: int
    author_id: int
    author: AuthorSummary
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
