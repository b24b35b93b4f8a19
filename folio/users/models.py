"""
User database model.

Usernames and emails are stored lowercase. Deleting a user removes the
articles, projects and comments they own.
"""
import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum, Index, func
from sqlalchemy.orm import relationship

from folio.shared.database import Base


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    AUTHOR = "AUTHOR"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    bio = Column(Text)
    avatar = Column(String(500))
    role = Column(Enum(Role, name="role"), nullable=False, default=Role.USER)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    last_login = Column(DateTime(timezone=True))

    articles = relationship("Article", back_populates="author", cascade="all, delete-orphan", passive_deletes=True)
    projects = relationship("Project", back_populates="author", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="author", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("ix_users_role_is_active", "role", "is_active"),
    )
