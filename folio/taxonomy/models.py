"""
Taxonomy database models: categories and tags for articles,
technologies for projects.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, func
from sqlalchemy.orm import Session

from folio.shared.database import Base


class Category(Base):
    """Article category. Cannot be deleted while articles reference it."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    description = Column(Text)
    color = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Technology(Base):
    __tablename__ = "technologies"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    icon = Column(String(500))
    color = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


def missing_ids(db: Session, model, ids) -> set[int]:
    """Return the ids in `ids` that have no row in model's table."""
    wanted = set(ids)
    if not wanted:
        return set()
    found = {row_id for (row_id,) in db.query(model.id).filter(model.id.in_(wanted))}
    return wanted - found
