"""Bulk operations over a repository: backup export/import and JSON-to-Markdown migration"""

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from mdcms.app_logger import get_logger
from mdcms.core.convert import fix_double_encoded_entities, html_to_markdown
from mdcms.core.documents import decode_document
from mdcms.core.models import ContentKind, Page, Post, PostStatus, StorageFormat
from mdcms.core.utils.dates import isoformat_utc, utc_now
from mdcms.crud.repository import MODELS, ContentRepository, content_dir, content_key
from mdcms.crud.storage import StorageError


logger = get_logger("pipeline")

BACKUP_VERSION = "1.0.0"
LEGACY_LOCALE = "default"   # backup key for non-localized content


def _scope(locale: str) -> str | None:
    return None if locale == LEGACY_LOCALE else locale


def run_export(repo: ContentRepository, locales: list[str], now: datetime | None = None) -> dict[str, Any]:
    """Snapshot all posts (drafts and scheduled included) and pages for each locale.

    With no locales configured the legacy paths are exported under the 'default' key.
    """
    now = now or utc_now()
    backup: dict[str, Any] = {
        "version": BACKUP_VERSION,
        "exportedAt": isoformat_utc(now),
        "posts": {},
        "pages": {},
    }
    for locale in locales or [LEGACY_LOCALE]:
        posts = repo.get_all_posts(_scope(locale), include_drafts=True, include_scheduled=True, now=now)
        pages = repo.get_all_pages(_scope(locale))
        backup["posts"][locale] = [p.model_dump(by_alias=True, exclude_none=True, mode="json") for p in posts]
        backup["pages"][locale] = [p.model_dump(by_alias=True, exclude_none=True, mode="json") for p in pages]
    return backup


def _import_items(
    repo: ContentRepository,
    kind: ContentKind,
    section: Any,
    errors: list[str],
    ) -> int:
    """Save every item of a {locale: [items]} backup section. Returns the count saved."""
    if not isinstance(section, dict):
        errors.append(f"Invalid {kind.value} section")
        return 0

    count = 0
    for locale, items in section.items():
        if not isinstance(items, list):
            errors.append(f"Invalid {kind.value} format for locale {locale}")
            continue
        for item in items:
            if not isinstance(item, dict) or not item.get("slug") or not item.get("title"):
                errors.append(f"Skipping {kind.name} with missing slug or title in locale {locale}")
                continue
            data = {**item, "id": item.get("id") or f"{locale}-{item['slug']}"}
            try:
                if kind is ContentKind.post:
                    data.setdefault("status", PostStatus.published.value)
                    saved = repo.save_post(Post.model_validate(data), _scope(locale))
                else:
                    saved = repo.save_page(Page.model_validate(data), _scope(locale))
            except ValidationError as e:
                errors.append(f"Error importing {kind.name} {item['slug']} in locale {locale}: {e}")
                continue
            if saved is None:
                errors.append(f"Error importing {kind.name} {item['slug']} in locale {locale}: save failed")
                continue
            count += 1
    return count


def run_import(repo: ContentRepository, backup: Any) -> dict[str, Any]:
    """Restore a backup produced by run_export. Raises ValueError if backup is not a mapping."""
    if not isinstance(backup, dict):
        raise ValueError("Invalid backup format: expected a JSON object")

    errors: list[str] = []
    posts = _import_items(repo, ContentKind.post, backup.get("posts", {}), errors)
    pages = _import_items(repo, ContentKind.page, backup.get("pages", {}), errors)
    logger.info("Imported %d posts and %d pages with %d errors", posts, pages, len(errors))
    return {"posts": posts, "pages": pages, "errors": errors}


def run_migrate(repo: ContentRepository, kind: ContentKind, locale: str | None = None) -> list[str]:
    """Rewrite JSON documents as Markdown with frontmatter, converting HTML content to Markdown.

    Only the JSON key is removed once the Markdown copy is written. Returns migrated slugs.
    """
    prefix = content_dir(kind, locale)
    try:
        names = repo.storage.list(prefix)
    except StorageError as e:
        logger.error("Error listing %s for migration: %s", prefix, e)
        return []

    suffix = f".{StorageFormat.json.value}"
    migrated = []
    for name in names:
        if "/" in name or not name.endswith(suffix):
            continue
        slug = name[:-len(suffix)]
        key = content_key(kind, slug, StorageFormat.json, locale)
        try:
            raw = repo.storage.get(key)
        except StorageError as e:
            logger.error("Error reading %s for migration: %s", key, e)
            continue
        doc = decode_document(raw, StorageFormat.json, MODELS[kind]) if raw else None
        if doc is None:
            continue
        doc.content = html_to_markdown(fix_double_encoded_entities(doc.content))
        saved = repo.save_post(doc, locale, "markdown") if kind is ContentKind.post \
            else repo.save_page(doc, locale, "markdown")
        if saved is None:
            continue
        try:
            repo.storage.delete(key)
        except StorageError as e:
            logger.error("Migrated %r but could not remove its JSON copy: %s", slug, e)
        migrated.append(slug)
    return migrated
