"""
Articles API

Blog article CRUD. Listing and reading are public; writes require a
bearer token and only the author may change or remove an article.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_, update, func
from sqlalchemy.orm import Session, selectinload

from folio.articles.models import Article, ArticleStatus, ArticleTag
from folio.articles.schemas import ArticleCreate, ArticleResponse, ArticleUpdate
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
from folio.taxonomy.models import Category, Tag, missing_ids
from folio.users.models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", tags=["articles"])

# Fields a client may explicitly clear with null
NULLABLE_FIELDS = {"excerpt", "published_at"}


def _article_query(db: Session):
    return db.query(Article).options(
        selectinload(Article.author),
        selectinload(Article.category),
        selectinload(Article.tag_links).selectinload(ArticleTag.tag),
    )


def _load_article(db: Session, article_id: int) -> Article:
    article = _article_query(db).filter(Article.id == article_id).first()
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


def _get_owned_article(db: Session, raw_id: str, user: CurrentUser, action: str) -> Article:
    article = _load_article(db, parse_id(raw_id, "article"))
    if article.author_id != user.user_id:
        raise HTTPException(status_code=403, detail=f"You can only {action} your own articles")
    return article


def _ensure_slug_available(db: Session, slug: str, exclude_id: Optional[int] = None) -> None:
    if not slug:
        raise HTTPException(status_code=400, detail="Title must contain letters or numbers")
    query = db.query(Article.id).filter(Article.slug == slug)
    if exclude_id is not None:
        query = query.filter(Article.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=400, detail="An article with this title already exists")


def _ensure_relations(db: Session, category_id: Optional[int], tag_ids: Optional[list[int]]) -> None:
    if category_id is not None and missing_ids(db, Category, [category_id]):
        raise HTTPException(status_code=400, detail="Category not found")
    if tag_ids and missing_ids(db, Tag, tag_ids):
        raise HTTPException(status_code=400, detail="Invalid tag IDs")


@router.get("", response_model=PaginatedResponse[ArticleResponse])
def list_articles(
    page: PageParams = Depends(),
    search: Optional[str] = None,
    category: Optional[str] = None,
    tag: Optional[str] = None,
    author: Optional[str] = None,
    status: Optional[ArticleStatus] = None,
    featured: Optional[bool] = None,
    viewer: Optional[CurrentUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    List articles, newest first.

    Filters:
    - search: case-insensitive match on title, excerpt or content
    - category / tag: numeric id or slug
    - author: numeric id, username, or "me" for the caller
    - status, featured
    """
    query = db.query(Article)

    if search:
        query = query.filter(or_(
            Article.title.icontains(search, autoescape=True),
            Article.excerpt.icontains(search, autoescape=True),
            Article.content.icontains(search, autoescape=True),
        ))

    if category:
        category_id = to_db_id(category)
        if category_id is not None:
            query = query.filter(Article.category_id == category_id)
        else:
            query = query.filter(Article.category.has(Category.slug == category))

    if tag:
        tag_id = to_db_id(tag)
        if tag_id is not None:
            query = query.filter(Article.tag_links.any(ArticleTag.tag_id == tag_id))
        else:
            query = query.filter(Article.tag_links.any(ArticleTag.tag.has(Tag.slug == tag)))

    if author:
        author_id = to_db_id(author)
        if author == "me":
            # Anonymous callers asking for their own articles get none
            query = query.filter(Article.author_id == (viewer.user_id if viewer else None))
        elif author_id is not None:
            query = query.filter(Article.author_id == author_id)
        else:
            query = query.filter(Article.author.has(func.lower(User.username) == author.lower()))

    if status is not None:
        query = query.filter(Article.status == status)

    if featured is not None:
        query = query.filter(Article.featured == featured)

    total = query.count()
    articles = (
        query.options(
            selectinload(Article.author),
            selectinload(Article.category),
            selectinload(Article.tag_links).selectinload(ArticleTag.tag),
        )
        .order_by(Article.created_at.desc(), Article.id.desc())
        .offset(page.offset)
        .limit(page.limit)
        .all()
    )

    return PaginatedResponse[ArticleResponse](
        data=[ArticleResponse.model_validate(a) for a in articles],
        pagination=Pagination.build(page.page, page.limit, total),
    )


@router.get("/{article_id}", response_model=ApiResponse[ArticleResponse])
def get_article(article_id: str, db: Session = Depends(get_db)):
    """Get one article. Every fetch counts as a view."""
    article_pk = parse_id(article_id, "article")
    article = _load_article(db, article_pk)

    db.execute(
        update(Article)
        .where(Article.id == article_pk)
        .values(view_count=Article.view_count + 1)
    )
    db.commit()
    db.refresh(article)

    return ApiResponse(data=ArticleResponse.model_validate(article))


@router.post("", response_model=ApiResponse[ArticleResponse], status_code=201)
def create_article(
    payload: ArticleCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an article owned by the caller. The slug comes from the title."""
    slug = slugify(payload.title)
    _ensure_slug_available(db, slug)
    _ensure_relations(db, payload.category_id, payload.tag_ids)

    article = Article(
        title=payload.title,
        slug=slug,
        content=payload.content,
        excerpt=payload.excerpt or None,
        category_id=payload.category_id,
        author_id=current_user.user_id,
        featured=payload.featured,
        status=payload.status,
        published_at=payload.published_at,
    )
    article.set_tags(payload.tag_ids)
    db.add(article)
    db.commit()

    logger.info(f"Article {article.id} '{slug}' created by {current_user.username}")

    return ApiResponse(
        data=ArticleResponse.model_validate(_load_article(db, article.id)),
        message="Article created successfully",
    )


@router.put("/{article_id}", response_model=ApiResponse[ArticleResponse])
def update_article(
    article_id: str,
    payload: ArticleUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update an article. Only supplied fields change; tagIds replaces the whole set."""
    article = _get_owned_article(db, article_id, current_user, "update")

    update_data = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    tag_ids = update_data.pop("tag_ids", None)

    if "title" in update_data:
        slug = slugify(update_data["title"])
        _ensure_slug_available(db, slug, exclude_id=article.id)
        update_data["slug"] = slug

    _ensure_relations(db, update_data.get("category_id"), tag_ids)

    for key, value in update_data.items():
        setattr(article, key, value)
    if tag_ids is not None:
        article.set_tags(tag_ids)

    db.commit()

    logger.info(f"Article {article.id} updated by {current_user.username}")

    return ApiResponse(
        data=ArticleResponse.model_validate(_load_article(db, article.id)),
        message="Article updated successfully",
    )


@router.delete("/{article_id}", response_model=ApiResponse[None])
def delete_article(
    article_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete an article along with its tag links and comments."""
    article = _get_owned_article(db, article_id, current_user, "delete")

    db.delete(article)
    db.commit()

    logger.info(f"Article {article_id} deleted by {current_user.username}")

    return ApiResponse(message="Article deleted successfully")
