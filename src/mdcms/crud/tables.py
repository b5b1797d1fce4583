"""Database table definitions for SQL-backed content storage"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


class StorageEntry(SQLModel, table=True):
    """One stored document (or any other value) addressed by its storage key"""
    __tablename__ = "storage_entries"
    key: str = Field(primary_key=True, description="Relative key, e.g. content/posts/en/hello.md")
    value: str = Field(..., sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
