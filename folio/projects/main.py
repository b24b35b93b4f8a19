"""
Projects API

CRUD endpoints for portfolio projects. Reads are public; writes require a
bearer token and are limited to the project's author.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from folio.projects.models import Project, ProjectStatus, ProjectTechnology
from folio.projects.schemas import ProjectCreate, ProjectResponse, ProjectUpdate
from folio.shared.auth import CurrentUser, get_current_user, get_optional_user
from folio.shared.database import get_db
from folio.shared.schemas import (
    ApiResponse,
    PageParams,
    PaginatedResponse,
    Pagination,
    parse_id,
    to_db_id,
)
from folio.shared.slugs import slugify
from folio.taxonomy.models import Technology, missing_ids

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])

# Fields a client may explicitly clear with null
NULLABLE_FIELDS = {"content", "image_url", "demo_url", "github_url"}


def _load_project(db: Session, project_id: int) -> Project:
    project = (
        db.query(Project)
        .options(
            selectinload(Project.author),
            selectinload(Project.technology_links).selectinload(ProjectTechnology.technology),
        )
        .filter(Project.id == project_id)
        .first()
    )
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _get_owned_project(db: Session, raw_id: str, user: CurrentUser, action: str) -> Project:
    project = _load_project(db, parse_id(raw_id, "project"))
    if project.author_id != user.user_id:
        raise HTTPException(status_code=403, detail=f"You can only {action} your own projects")
    return project


def _ensure_slug_available(db: Session, slug: str, exclude_id: Optional[int] = None) -> None:
    if not slug:
        raise HTTPException(status_code=400, detail="Title must contain letters or numbers")
    query = db.query(Project.id).filter(Project.slug == slug)
    if exclude_id is not None:
        query = query.filter(Project.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=400, detail="A project with this title already exists")


def _ensure_technologies(db: Session, technology_ids: Optional[list[int]]) -> None:
    if technology_ids and missing_ids(db, Technology, technology_ids):
        raise HTTPException(status_code=400, detail="Invalid technology IDs")


# ──────────────────────────────────────────────────────────────────────────────
# Public endpoints (no auth required)
# ──────────────────────────────────────────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[ProjectResponse])
def list_projects(
    page: PageParams = Depends(),
    search: Optional[str] = None,
    technology: Optional[str] = None,
    status: Optional[ProjectStatus] = None,
    featured: Optional[bool] = None,
    mine: bool = False,
    viewer: Optional[CurrentUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    List projects.
    Sorted by order (ascending), then by created_at (descending).
    Count and page are read in the session's single transaction.
    """
    query = db.query(Project)

    if search:
        query = query.filter(or_(
            Project.title.icontains(search, autoescape=True),
            Project.description.icontains(search, autoescape=True),
            Project.content.icontains(search, autoescape=True),
        ))

    if technology:
        technology_id = to_db_id(technology)
        if technology_id is not None:
            query = query.filter(Project.technology_links.any(ProjectTechnology.technology_id == technology_id))
        else:
            query = query.filter(
                Project.technology_links.any(ProjectTechnology.technology.has(Technology.slug == technology))
            )

    if status is not None:
        query = query.filter(Project.status == status)

    if featured is not None:
        query = query.filter(Project.featured == featured)

    if mine:
        query = query.filter(Project.author_id == (viewer.user_id if viewer else None))

    total = query.count()
    projects = (
        query.options(
            selectinload(Project.author),
            selectinload(Project.technology_links).selectinload(ProjectTechnology.technology),
        )
        .order_by(Project.order.asc(), Project.created_at.desc(), Project.id.desc())
        .offset(page.offset)
        .limit(page.limit)
        .all()
    )

    return PaginatedResponse[ProjectResponse](
        data=[ProjectResponse.model_validate(p) for p in projects],
        pagination=Pagination.build(page.page, page.limit, total),
    )


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
def get_project(project_id: str, db: Session = Depends(get_db)):
    """Get a single project by id."""
    project = _load_project(db, parse_id(project_id, "project"))
    return ApiResponse(data=ProjectResponse.model_validate(project))


# ──────────────────────────────────────────────────────────────────────────────
# Author endpoints (bearer token required)
# ──────────────────────────────────────────────────────────────────────────────

@router.post("", response_model=ApiResponse[ProjectResponse], status_code=201)
def create_project(
    payload: ProjectCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new project."""
    slug = slugify(payload.title)
    _ensure_slug_available(db, slug)
    _ensure_technologies(db, payload.technology_ids)

    project = Project(
        **payload.model_dump(exclude={"technology_ids"}),
        slug=slug,
        author_id=current_user.user_id,
    )
    project.set_technologies(payload.technology_ids)
    db.add(project)
    db.commit()

    logger.info(f"Project {project.id} '{slug}' created by {current_user.username}")

    return ApiResponse(
        data=ProjectResponse.model_validate(_load_project(db, project.id)),
        message="Project created successfully",
    )


@router.put("/{project_id}", response_model=ApiResponse[ProjectResponse])
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update an existing project."""
    project = _get_owned_project(db, project_id, current_user, "update")

    # Update only provided fields
    update_data = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    technology_ids = update_data.pop("technology_ids", None)

    # Check for slug conflict if the title changes
    if "title" in update_data:
        slug = slugify(update_data["title"])
        _ensure_slug_available(db, slug, exclude_id=project.id)
        update_data["slug"] = slug

    _ensure_technologies(db, technology_ids)

    for key, value in update_data.items():
        setattr(project, key, value)
    if technology_ids is not None:
        project.set_technologies(technology_ids)

    db.commit()

    logger.info(f"Project {project.id} updated by {current_user.username}")

    return ApiResponse(
        data=ProjectResponse.model_validate(_load_project(db, project.id)),
        message="Project updated successfully",
    )


@router.delete("/{project_id}", response_model=ApiResponse[None])
def delete_project(
    project_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a project."""
    project = _get_owned_project(db, project_id, current_user, "delete")

    db.delete(project)
    db.commit()

    logger.info(f"Project {project_id} deleted by {current_user.username}")

    return ApiResponse(message="Project deleted successfully")
