"""
Pydantic schemas for Projects API.

Defines request/response models with validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from folio.projects.models import ProjectStatus
from folio.shared.schemas import CamelModel, DbId
from folio.taxonomy.schemas import TechnologyResponse
from folio.users.schemas import AuthorSummary


class ProjectCreate(CamelModel):
    """Schema for creating a new project."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    content: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    demo_url: Optional[str] = Field(None, max_length=500)
    github_url: Optional[str] = Field(None, max_length=500)
    technology_ids: list[DbId] = Field(default_factory=list)
    featured: bool = False
    status: ProjectStatus = ProjectStatus.PLANNING
    order: int = 0


class ProjectUpdate(CamelModel):
    """Schema for updating a project. All fields optional."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    demo_url: Optional[str] = Field(None, max_length=500)
    github_url: Optional[str] = Field(None, max_length=500)
    technology_ids: Optional[list[DbId]] = None
    featured: Optional[bool] = None
    status: Optional[ProjectStatus] = None
    order: Optional[int] = None


class ProjectResponse(CamelModel):
    """Schema for project responses."""
    id: int
    title: str
    slug: str
    description: str
    content: Optional[str] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    status: ProjectStatus
    featured: bool
    order: int
    author_id: int
    author: AuthorSummary
    technologies: list[TechnologyResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
