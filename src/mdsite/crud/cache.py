"""Key/value cache with TTL backed by the cache_entries table"""

from datetime import datetime, timedelta
from typing import Any

from sqlmodel import Session

from mdsite.crud.models import CacheEntry


class CacheStore:
    """get/put/forget over a SQLModel engine. Each put replaces the whole value."""

    def __init__(self, engine):
        self.engine = engine

    def get(self, key: str, default: Any = None, now: datetime | None = None) -> Any:
        """Return the stored value, or default when missing or expired."""
        with Session(self.engine) as session:
            entry = session.get(CacheEntry, key)
            if entry is None or entry.expires_at <= (now or datetime.now()):
                return default
            return entry.value

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store value under key for ttl_seconds, replacing any previous value in one transaction."""
        now = datetime.now()
        with Session(self.engine) as session:
            entry = session.get(CacheEntry, key) or CacheEntry(key=key, expires_at=now)
            entry.value = value
            entry.expires_at = now + timedelta(seconds=ttl_seconds)
            entry.updated_at = now
            session.add(entry)
            session.commit()

    def forget(self, key: str) -> bool:
        """Delete key; returns whether it existed."""
        with Session(self.engine) as session:
            entry = session.get(CacheEntry, key)
            if entry is None:
                return False
            session.delete(entry)
            session.commit()
            return True
