"""Document models (posts, pages) and the transient Markdown block nodes"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ContentKind(str, Enum):
    """Content collections; the value is the storage directory name"""
    post = "posts"
    page = "pages"


class StorageFormat(str, Enum):
    """Persisted document formats; the value is the file extension"""
    json = "json"
    markdown = "md"

    @classmethod
    def from_name(cls, name: str | None) -> "StorageFormat":
        """Map a user-facing format name ('json' | 'markdown') to a StorageFormat."""
        return cls.markdown if name in ("markdown", "md") else cls.json


class PostStatus(str, Enum):
    """Publication state of a post"""
    draft = "draft"
    published = "published"
    scheduled = "scheduled"


class Document(BaseModel):
    """Fields shared by posts and pages. JSON keys use camelCase aliases."""
    model_config = ConfigDict(populate_by_name=True)

    id:      Optional[str] = None   # assigned on first save
    title:   str
    slug:    str
    content: str = ""
    excerpt: Optional[str] = None
    author:  Optional[str] = None
    date:    Optional[str] = None   # ISO-8601


class Post(Document):
    status:         Optional[PostStatus] = None   # None reads as published
    scheduled_date: Optional[str] = Field(default=None, alias="scheduledDate")
    categories:     list[str] = Field(default_factory=list)
    tags:           list[str] = Field(default_factory=list)
    updated_at:     Optional[str] = Field(default=None, alias="updatedAt")

    @property
    def effective_status(self) -> PostStatus:
        return self.status or PostStatus.published


class Page(Document):
    pass


# --- block nodes produced by the Markdown block parser; never persisted ---

@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class Paragraph:
    text: str


@dataclass(frozen=True)
class Blockquote:
    text: str


@dataclass(frozen=True)
class ListBlock:
    ordered: bool
    items: tuple[str, ...]


@dataclass(frozen=True)
class CodeBlock:
    lang: str
    code: str


@dataclass(frozen=True)
class ImageLine:
    raw: str


Block = Union[Heading, Paragraph, Blockquote, ListBlock, CodeBlock, ImageLine]
