"""
Site statistics model.

A flat key/value table (e.g. total_articles -> "12"). Values are written
by administrators, not recomputed from live content.
"""
from sqlalchemy import Column, Integer, String, DateTime, func

from folio.shared.database import Base


class SiteStats(Base):
    __tablename__ = "site_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(100), nullable=False, unique=True, index=True)
    value = Column(String(500), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
