"""
Article database models.

ArticleTag is an associative entity keyed by (article_id, tag_id). Its
rows are created with the article and removed with either side.
"""
import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum, ForeignKey, Index, func
from sqlalchemy.orm import relationship

from folio.shared.database import Base


class ArticleStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class ArticleTag(Base):
    __tablename__ = "article_tags"

    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    article = relationship("Article", back_populates="tag_links")
    tag = relationship("Tag", lazy="joined")


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    excerpt = Column(Text)
    content = Column(Text, nullable=False)
    status = Column(Enum(ArticleStatus, name="article_status"), nullable=False, default=ArticleStatus.DRAFT)
    featured = Column(Boolean, nullable=False, default=False)
    view_count = Column(Integer, nullable=False, default=0)
    published_at = Column(DateTime(timezone=True))  # Not stamped by status changes
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)

    author = relationship("User", back_populates="articles")
    category = relationship("Category")
    tag_links = relationship(
        "ArticleTag",
        back_populates="article",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    comments = relationship("Comment", back_populates="article", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("ix_articles_status_published_at", "status", "published_at"),
        Index("ix_articles_featured_status", "featured", "status"),
    )

    @property
    def tags(self):
        return [link.tag for link in self.tag_links]

    def set_tags(self, tag_ids) -> None:
        """Replace the tag set with the given ids."""
        existing = {link.tag_id: link for link in self.tag_links}
        self.tag_links = [
            existing.get(tag_id) or ArticleTag(tag_id=tag_id)
            for tag_id in dict.fromkeys(tag_ids)
        ]
