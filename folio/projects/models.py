"""
Projects database models.

Stores portfolio projects and their technology links.
"""
import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum, ForeignKey, Index, func
from sqlalchemy.orm import relationship

from folio.shared.database import Base


class ProjectStatus(str, enum.Enum):
    PLANNING = "PLANNING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON_HOLD"


class ProjectTechnology(Base):
    """Associative row linking a project to a technology."""
    __tablename__ = "project_technologies"

    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    technology_id = Column(Integer, ForeignKey("technologies.id", ondelete="CASCADE"), primary_key=True)

    project = relationship("Project", back_populates="technology_links")
    technology = relationship("Technology", lazy="joined")


class Project(Base):
    """
    Project model for portfolio projects.

    Stores all project data including:
    - Basic info (title, description, content)
    - Links (image, demo, GitHub)
    - Display settings (status, featured, order)
    """
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    content = Column(Text)  # Markdown for detailed description
    image_url = Column(String(500))
    demo_url = Column(String(500))
    github_url = Column(String(500))
    status = Column(Enum(ProjectStatus, name="project_status"), nullable=False, default=ProjectStatus.PLANNING)
    featured = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    author = relationship("User", back_populates="projects")
    technology_links = relationship(
        "ProjectTechnology",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_projects_status_featured", "status", "featured"),
    )

    @property
    def technologies(self):
        return [link.technology for link in self.technology_links]

    def set_technologies(self, technology_ids) -> None:
        """Replace the technology set with the given ids."""
        existing = {link.technology_id: link for link in self.technology_links}
        self.technology_links = [
            existing.get(technology_id) or ProjectTechnology(technology_id=technology_id)
            for technology_id in dict.fromkeys(technology_ids)
        ]
