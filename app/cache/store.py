"""
Persistent primary tier for the stats cache.

Wraps a SQLAlchemy key-value table. Every failure (connection refused,
timeouts, malformed rows) is raised as CacheStoreError so the tiered cache
can treat it as a miss.
"""
import json
import logging
import threading
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.errors import CacheStoreError
from app.models import Base, CachedStats

from .core import CacheEntry, DataCategory, as_utc

logger = logging.getLogger("cache.store")


def create_store_engine(database_url: str, timeout: float = 5.0):
    """Create an engine for the cache table."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}  # Needed for SQLite
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise each thread sees an empty DB
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)

    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_timeout=timeout,
    )


class StatsStore:
    """
    Key-value access to the `stats_cache` table.

    The schema is created lazily on first use, so a store that is down at
    startup starts working once it comes back.
    """

    def __init__(self, database_url: str, timeout: float = 5.0):
        self.database_url = database_url
        self._engine = create_store_engine(database_url, timeout=timeout)
        self._session_factory = sessionmaker(autoflush=False, bind=self._engine)
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        with self._schema_lock:
            if not self._schema_ready:
                Base.metadata.create_all(bind=self._engine)
                self._schema_ready = True
                logger.info("Stats cache table ready")

    def get(self, cache_key: str) -> Optional[CacheEntry]:
        """
        Read one entry.

        Raises:
            CacheStoreError: store unreachable or row unreadable
        """
        try:
            self._ensure_schema()
            with self._session_factory() as session:
                row = session.get(CachedStats, cache_key)
                if row is None:
                    return None
                return CacheEntry(
                    payload=json.loads(row.payload),
                    stored_at=as_utc(row.stored_at),
                    category=DataCategory(row.category),
                )
        except (SQLAlchemyError, ValueError, TypeError) as e:
            raise CacheStoreError(f"Failed to read {cache_key}: {e}") from e

    def upsert(self, cache_key: str, entry: CacheEntry) -> None:
        """
        Insert or replace one entry.

        Raises:
            CacheStoreError: store unreachable or payload not serializable
        """
        try:
            self._ensure_schema()
            row = CachedStats(
                cache_key=cache_key,
                category=entry.category.value,
                payload=json.dumps(entry.payload),
                stored_at=entry.stored_at,
            )
            with self._session_factory() as session:
                session.merge(row)
                session.commit()
        except (SQLAlchemyError, ValueError, TypeError) as e:
            raise CacheStoreError(f"Failed to write {cache_key}: {e}") from e

    def close(self) -> None:
        self._engine.dispose()
