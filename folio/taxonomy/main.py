"""
Taxonomy API

Categories and tags classify articles; technologies tag projects. Anyone
can list them so clients can look up ids; editors create them.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from folio.articles.models import Article
from folio.shared.auth import require_roles
from folio.shared.database import get_db
from folio.shared.schemas import ApiResponse, parse_id
from folio.shared.slugs import slugify
from folio.taxonomy.models import Category, Tag, Technology
from folio.taxonomy.schemas import (
    CategoryCreate,
    CategoryResponse,
    TagCreate,
    TagResponse,
    TechnologyCreate,
    TechnologyResponse,
)
from folio.users.models import Role

logger = logging.getLogger(__name__)

router = APIRouter(tags=["taxonomy"])

require_editor = require_roles(Role.ADMIN, Role.AUTHOR)
require_admin = require_roles(Role.ADMIN)


def _resolve_slug(name: str, slug: Optional[str]) -> str:
    resolved = slug or slugify(name)
    if not resolved:
        raise HTTPException(status_code=400, detail="Name must contain letters or numbers")
    return resolved


def _ensure_unique(db: Session, model, name: str, slug: str, label: str) -> None:
    clash = (
        db.query(model.id)
        .filter(or_(func.lower(model.name) == name.lower(), model.slug == slug))
        .first()
    )
    if clash:
        raise HTTPException(status_code=400, detail=f"{label} already exists")


# ──────────────────────────────────────────────────────────────────────────────
# Categories
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/categories", response_model=ApiResponse[list[CategoryResponse]])
def list_categories(db: Session = Depends(get_db)):
    categories = db.query(Category).order_by(Category.name.asc()).all()
    return ApiResponse(data=[CategoryResponse.model_validate(c) for c in categories])


@router.post(
    "/categories",
    response_model=ApiResponse[CategoryResponse],
    status_code=201,
    dependencies=[Depends(require_editor)],
)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    slug = _resolve_slug(payload.name, payload.slug)
    _ensure_unique(db, Category, payload.name, slug, "Category")

    category = Category(
        name=payload.name,
        slug=slug,
        description=payload.description,
        color=payload.color,
    )
    db.add(category)
    db.commit()
    db.refresh(category)

    logger.info(f"Category '{slug}' created")
    return ApiResponse(data=CategoryResponse.model_validate(category), message="Category created successfully")


@router.delete(
    "/categories/{category_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(require_admin)],
)
def delete_category(category_id: str, db: Session = Depends(get_db)):
    """Delete a category. Refused while any article still uses it."""
    category = db.get(Category, parse_id(category_id, "category"))
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    in_use = db.query(Article.id).filter(Article.category_id == category.id).first()
    if in_use:
        raise HTTPException(status_code=400, detail="Cannot delete a category that has articles")

    slug = category.slug
    db.delete(category)
    db.commit()

    logger.info(f"Category '{slug}' deleted")
    return ApiResponse(message="Category deleted successfully")


# ──────────────────────────────────────────────────────────────────────────────
# Tags
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/tags", response_model=ApiResponse[list[TagResponse]])
def list_tags(db: Session = Depends(get_db)):
    tags = db.query(Tag).order_by(Tag.name.asc()).all()
    return ApiResponse(data=[TagResponse.model_validate(t) for t in tags])


@router.post(
    "/tags",
    response_model=ApiResponse[TagResponse],
    status_code=201,
    dependencies=[Depends(require_editor)],
)
def create_tag(payload: TagCreate, db: Session = Depends(get_db)):
    slug = _resolve_slug(payload.name, payload.slug)
    _ensure_unique(db, Tag, payload.name, slug, "Tag")

    tag = Tag(name=payload.name, slug=slug)
    db.add(tag)
    db.commit()
    db.refresh(tag)

    return ApiResponse(data=TagResponse.model_validate(tag), message="Tag created successfully")


# ──────────────────────────────────────────────────────────────────────────────
# Technologies
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/technologies", response_model=ApiResponse[list[TechnologyResponse]])
def list_technologies(db: Session = Depends(get_db)):
    technologies = db.query(Technology).order_by(Technology.name.asc()).all()
    return ApiResponse(data=[TechnologyResponse.model_validate(t) for t in technologies])


@router.post(
    "/technologies",
    response_model=ApiResponse[TechnologyResponse],
    status_code=201,
    dependencies=[Depends(require_editor)],
)
def create_technology(payload: TechnologyCreate, db: Session = Depends(get_db)):
    slug = _resolve_slug(payload.name, payload.slug)
    _ensure_unique(db, Technology, payload.name, slug, "Technology")

    technology = Technology(name=payload.name, slug=slug, icon=payload.icon, color=payload.color)
    db.add(technology)
    db.commit()
    db.refresh(technology)

    return ApiResponse(data=TechnologyResponse.model_validate(technology), message="Technology created successfully")
