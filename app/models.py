"""
Database models for the persistent stats cache.
SQLAlchemy ORM model for the key-value cache table.
"""
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CachedStats(Base):
    """
    One cached payload per stats key.
    Rows are upserted wholesale on refresh and never deleted.
    """
    __tablename__ = "stats_cache"

    cache_key = Column(String, primary_key=True)
    category = Column(String, nullable=False)
    payload = Column(Text, nullable=False)  # JSON-encoded
    stored_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<CachedStats(cache_key='{self.cache_key}', stored_at={self.stored_at})>"
