"""Database table definitions for the key/value build cache"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, DateTime, String
from sqlmodel import Field, SQLModel


class CacheEntry(SQLModel, table=True):
    """One cached value; expired rows are treated as absent"""
    __tablename__ = "cache_entries"
    key: str = Field(sa_column=Column(String(255), primary_key=True))
    value: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
    expires_at: datetime = Field(..., sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
