"""
Comments API

Readers comment on articles; comments stay hidden until an admin
approves them.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from folio.articles.models import Article
from folio.comments.models import Comment
from folio.comments.schemas import CommentCreate, CommentResponse
from folio.shared.auth import CurrentUser, get_current_user, require_roles
from folio.shared.database import get_db
from folio.shared.schemas import ApiResponse, parse_id
from folio.users.models import Role

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])


def _require_article(db: Session, raw_id: str) -> Article:
    article = db.get(Article, parse_id(raw_id, "article"))
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


def _require_comment(db: Session, raw_id: str) -> Comment:
    comment = (
        db.query(Comment)
        .options(selectinload(Comment.author))
        .filter(Comment.id == parse_id(raw_id, "comment"))
        .first()
    )
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


@router.get("/articles/{article_id}/comments", response_model=ApiResponse[list[CommentResponse]])
def list_comments(article_id: str, db: Session = Depends(get_db)):
    """Approved comments for an article, oldest first."""
    article = _require_article(db, article_id)
    comments = (
        db.query(Comment)
        .options(selectinload(Comment.author))
        .filter(Comment.article_id == article.id, Comment.approved.is_(True))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return ApiResponse(data=[CommentResponse.model_validate(c) for c in comments])


@router.post(
    "/articles/{article_id}/comments",
    response_model=ApiResponse[CommentResponse],
    status_code=201,
)
def create_comment(
    article_id: str,
    payload: CommentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    article = _require_article(db, article_id)

    comment = Comment(
        content=payload.content,
        article_id=article.id,
        author_id=current_user.user_id,
        approved=False,
    )
    db.add(comment)
    db.commit()

    logger.info(f"Comment {comment.id} on article {article.id} awaiting moderation")

    return ApiResponse(
        data=CommentResponse.model_validate(_require_comment(db, str(comment.id))),
        message="Comment submitted for moderation",
    )


@router.patch(
    "/comments/{comment_id}/approve",
    response_model=ApiResponse[CommentResponse],
    dependencies=[Depends(require_roles(Role.ADMIN))],
)
def approve_comment(comment_id: str, db: Session = Depends(get_db)):
    comment = _require_comment(db, comment_id)
    comment.approved = True
    db.commit()
    return ApiResponse(
        data=CommentResponse.model_validate(_require_comment(db, comment_id)),
        message="Comment approved",
    )


@router.delete("/comments/{comment_id}", response_model=ApiResponse[None])
def delete_comment(
    comment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove a comment. Allowed for its author and for admins."""
    comment = _require_comment(db, comment_id)
    if comment.author_id != current_user.user_id and current_user.role != Role.ADMIN:
        raise HTTPException(status_code=403, detail="You can only delete your own comments")

    db.delete(comment)
    db.commit()
    return ApiResponse(message="Comment deleted successfully")
