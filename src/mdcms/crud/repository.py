"""Content repository: storage key resolution, document decoding, and visibility filtering"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Callable, Optional, TypeVar
from uuid import uuid4

from mdcms.app_logger import get_logger
from mdcms.core.convert import fix_double_encoded_entities
from mdcms.core.documents import decode_document, encode_document
from mdcms.core.models import ContentKind, Document, Page, Post, StorageFormat
from mdcms.core.publication import is_visible, sort_key
from mdcms.core.utils.dates import isoformat_utc, utc_now
from mdcms.core.utils.slug import slugify
from mdcms.crud.storage import StorageAdapter, StorageError


logger = get_logger("repository")

D = TypeVar("D", bound=Document)

CONTENT_ROOT = "content"
MODELS: dict[ContentKind, type[Document]] = {ContentKind.post: Post, ContentKind.page: Page}


def content_dir(kind: ContentKind, locale: str | None = None) -> str:
    """Directory prefix (with trailing '/') holding documents of kind, for a locale or the legacy path."""
    base = f"{CONTENT_ROOT}/{kind.value}/"
    return f"{base}{locale}/" if locale else base


def content_key(kind: ContentKind, slug: str, fmt: StorageFormat, locale: str | None = None) -> str:
    return f"{content_dir(kind, locale)}{slug}.{fmt.value}"


def read_candidates(kind: ContentKind, slug: str, locale: str | None = None) -> list[tuple[str, StorageFormat]]:
    """Keys tried on read, in order: locale md, locale json, legacy md, legacy json."""
    scopes = [locale, None] if locale else [None]
    return [
        (content_key(kind, slug, fmt, scope), fmt)
        for scope in scopes
        for fmt in (StorageFormat.markdown, StorageFormat.json)
    ]


def _slug_from_key(name: str) -> str | None:
    """Slug for a direct-child key such as 'hello.md'; None for nested keys and other files."""
    if "/" in name:
        return None
    for fmt in StorageFormat:
        suffix = f".{fmt.value}"
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[:-len(suffix)]
    return None


class ContentRepository:
    """Posts and pages over a StorageAdapter.

    Public methods never raise for storage or decoding failures: they log and
    return None, False, or an empty collection instead.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        *,
        default_format: str = "json",
        clock: Optional[Callable[[], datetime]] = None,
        ):
        self.storage = storage
        self.default_format = StorageFormat.from_name(default_format)
        self.clock = clock or utc_now

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def locate(
        self, kind: ContentKind, slug: str, locale: str | None = None,
        ) -> Optional[tuple[str, StorageFormat, str]]:
        """Return (key, format, raw) of the first stored candidate, or None."""
        for key, fmt in read_candidates(kind, slug, locale):
            raw = self.storage.get(key)
            if raw:
                return key, fmt, raw
        return None

    def _get(self, kind: ContentKind, slug: str, locale: str | None) -> Optional[Document]:
        try:
            found = self.locate(kind, slug, locale)
        except StorageError as e:
            logger.error("Error getting %s %r: %s", kind.value, slug, e)
            return None
        if found is None:
            return None
        key, fmt, raw = found
        doc = decode_document(raw, fmt, MODELS[kind])
        if doc is None:
            logger.warning("Skipping undecodable document at %s", key)
            return None
        doc.content = fix_double_encoded_entities(doc.content)
        if doc.excerpt:
            doc.excerpt = fix_double_encoded_entities(doc.excerpt)
        return doc

    def _list_slugs(self, kind: ContentKind, locale: str | None) -> list[str]:
        """Distinct slugs stored directly under the locale (or legacy) directory. Raises StorageError."""
        slugs: dict[str, None] = {}
        for name in self.storage.list(content_dir(kind, locale)):
            slug = _slug_from_key(name)
            if slug:
                slugs.setdefault(slug)
        return list(slugs)

    def _list(self, kind: ContentKind, locale: str | None) -> list[Document]:
        try:
            slugs = self._list_slugs(kind, locale)
        except StorageError as e:
            logger.error("Error listing %s: %s", kind.value, e)
            return []
        docs = []
        for slug in slugs:
            doc = self._get(kind, slug, locale)
            if doc is not None:
                docs.append(doc)
        return docs

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _save(self, kind: ContentKind, doc: D, locale: str | None, fmt: str | StorageFormat | None) -> Optional[D]:
        if fmt is None:
            fmt = self.default_format
        elif not isinstance(fmt, StorageFormat):
            fmt = StorageFormat.from_name(fmt)

        updates: dict = {}
        if not doc.slug:
            updates["slug"] = slugify(doc.title)
        if not doc.id:
            updates["id"] = f"{kind.name}-{uuid4().hex[:12]}"
        if isinstance(doc, Post):
            updates["updated_at"] = isoformat_utc(self.clock())
        stored = doc.model_copy(update=updates)

        key = content_key(kind, stored.slug, fmt, locale)
        try:
            if not self.storage.set(key, encode_document(stored, fmt)):
                logger.error("Storage refused write of %s", key)
                return None
        except StorageError as e:
            logger.error("Error saving %s %r: %s", kind.value, stored.slug, e)
            return None
        logger.info("Saved %s", key)
        return stored

    def _delete(self, kind: ContentKind, slug: str, locale: str | None) -> bool:
        """Delete both formats at the locale (or legacy) path; True if either existed."""
        deleted = False
        for fmt in StorageFormat:
            key = content_key(kind, slug, fmt, locale)
            try:
                deleted = self.storage.delete(key) or deleted
            except StorageError as e:
                logger.error("Error deleting %s: %s", key, e)
        return deleted

    def _update(self, kind: ContentKind, slug: str, doc: D, locale: str | None, fmt) -> Optional[D]:
        """Save doc; a changed slug is a create under the new slug plus a delete of the old one."""
        saved = self._save(kind, doc, locale, fmt)
        if saved is not None and saved.slug != slug:
            self._delete(kind, slug, locale)
        return saved

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------
    def get_post(self, slug: str, locale: str | None = None) -> Optional[Post]:
        return self._get(ContentKind.post, slug, locale)

    def get_visible_post(
        self, slug: str, locale: str | None = None, *, preview: bool = False, now: datetime | None = None,
        ) -> Optional[Post]:
        """Return the post if the public may see it; preview shows drafts and future posts too."""
        post = self.get_post(slug, locale)
        if post is None:
            return None
        if preview or is_visible(post, now or self.clock()):
            return post
        return None

    def get_all_posts(
        self,
        locale: str | None = None,
        include_drafts: bool = False,
        include_scheduled: bool = False,
        now: datetime | None = None,
        ) -> list[Post]:
        """Visible posts, newest first (scheduled posts by their release date)."""
        now = now or self.clock()
        posts = [
            p for p in self._list(ContentKind.post, locale)
            if is_visible(p, now, include_drafts, include_scheduled)
        ]
        return sorted(posts, key=sort_key, reverse=True)

    def save_post(self, post: Post, locale: str | None = None, fmt: str | None = None) -> Optional[Post]:
        return self._save(ContentKind.post, post, locale, fmt)

    def update_post(self, slug: str, post: Post, locale: str | None = None, fmt: str | None = None) -> Optional[Post]:
        return self._update(ContentKind.post, slug, post, locale, fmt)

    def delete_post(self, slug: str, locale: str | None = None) -> bool:
        return self._delete(ContentKind.post, slug, locale)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------
    def get_page(self, slug: str, locale: str | None = None) -> Optional[Page]:
        return self._get(ContentKind.page, slug, locale)

    def get_all_pages(self, locale: str | None = None) -> list[Page]:
        return self._list(ContentKind.page, locale)

    def save_page(self, page: Page, locale: str | None = None, fmt: str | None = None) -> Optional[Page]:
        return self._save(ContentKind.page, page, locale, fmt)

    def update_page(self, slug: str, page: Page, locale: str | None = None, fmt: str | None = None) -> Optional[Page]:
        return self._update(ContentKind.page, slug, page, locale, fmt)

    def delete_page(self, slug: str, locale: str | None = None) -> bool:
        return self._delete(ContentKind.page, slug, locale)

    # ------------------------------------------------------------------
    # Taxonomy
    # ------------------------------------------------------------------
    def get_posts_by_category(self, category: str, locale: str | None = None, now: datetime | None = None) -> list[Post]:
        return [p for p in self.get_all_posts(locale, now=now) if category in p.categories]

    def get_posts_by_tag(self, tag: str, locale: str | None = None, now: datetime | None = None) -> list[Post]:
        return [p for p in self.get_all_posts(locale, now=now) if tag in p.tags]

    def category_counts(self, locale: str | None = None, now: datetime | None = None) -> dict[str, int]:
        """Visible posts per category slug."""
        return dict(Counter(c for p in self.get_all_posts(locale, now=now) for c in set(p.categories)))

    def tag_counts(self, locale: str | None = None, now: datetime | None = None) -> dict[str, int]:
        return dict(Counter(t for p in self.get_all_posts(locale, now=now) for t in set(p.tags)))
