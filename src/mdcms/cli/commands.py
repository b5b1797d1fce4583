"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdcms.app_logger import setup_logging
from mdcms.config import Settings, load_config
from mdcms.core.convert import html_to_markdown, markdown_to_html
from mdcms.core.models import ContentKind, Post
from mdcms.core.pipeline import run_export, run_import, run_migrate
from mdcms.core.utils.text import format_reading_time, reading_time, word_count
from mdcms.crud.repository import CONTENT_ROOT, ContentRepository
from mdcms.crud.storage import FileStorage, make_storage


KindOption = Annotated[str, typer.Option("--kind", help="posts or pages")]
LocaleOption = Annotated[Optional[str], typer.Option("--locale", help="Locale code; omit for legacy paths")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    setup_logging(settings.log_level)
    return settings


def _repo(settings: Settings) -> ContentRepository:
    try:
        storage = make_storage(settings)
    except Exception as e:
        _fail("Cannot open storage", e)
    return ContentRepository(storage, default_format=settings.default_format)


def _kind(value: str) -> ContentKind:
    try:
        return ContentKind(value)
    except ValueError:
        _fail(f"Unknown kind {value!r}; expected 'posts' or 'pages'")


def init_cmd(
    content_dir: Annotated[Optional[str], typer.Option("--content-dir", help="Root directory for file storage")] = None,
    ):
    """Prepare the configured storage (content directories or database tables)."""
    settings = _settings(overrides={"content_dir": content_dir})
    storage = _repo(settings).storage
    if isinstance(storage, FileStorage):
        for kind in ContentKind:
            (storage.root / CONTENT_ROOT / kind.value).mkdir(parents=True, exist_ok=True)
        typer.echo(f"Content directories ready under: {storage.root}")
    else:
        typer.echo(f"Database initialized at: {settings.db_url}")


def list_cmd(
    kind: KindOption = "posts",
    locale: LocaleOption = None,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include draft posts")] = False,
    scheduled: Annotated[bool, typer.Option("--scheduled", help="Include posts scheduled for later")] = False,
    ):
    """List posts (newest first) or pages."""
    content_kind = _kind(kind)
    repo = _repo(_settings())
    if content_kind is ContentKind.post:
        docs = repo.get_all_posts(locale, include_drafts=drafts, include_scheduled=scheduled)
    else:
        docs = repo.get_all_pages(locale)
    if not docs:
        typer.echo(f"No {content_kind.value} found.")
        raise typer.Exit(1)
    for doc in docs:
        if isinstance(doc, Post):
            typer.echo(f"{doc.date or '-':<25} {doc.effective_status.value:<10} {doc.slug}  {doc.title}")
        else:
            typer.echo(f"{doc.slug}  {doc.title}")


def show_cmd(
    slug: Annotated[str, typer.Argument(help="Slug of the post or page")],
    kind: KindOption = "posts",
    locale: LocaleOption = None,
    to: Annotated[Optional[str], typer.Option("--to", help="Convert content to html or markdown")] = None,
    ):
    """Print one document's metadata and content."""
    content_kind = _kind(kind)
    settings = _settings()
    repo = _repo(settings)
    doc = repo.get_post(slug, locale) if content_kind is ContentKind.post else repo.get_page(slug, locale)
    if doc is None:
        _fail(f"No {content_kind.name} with slug {slug!r}")

    content = doc.content
    if to == "html":
        content = markdown_to_html(content)
    elif to == "markdown":
        content = html_to_markdown(content)
    elif to is not None:
        _fail(f"Unknown target {to!r}; expected 'html' or 'markdown'")

    minutes = reading_time(word_count(doc.content), settings.words_per_minute)
    typer.echo(f"{doc.title} ({format_reading_time(minutes)})")
    typer.echo(json.dumps(doc.model_dump(by_alias=True, exclude_none=True, exclude={"content"}, mode="json"), indent=2))
    typer.echo("")
    typer.echo(content)


def delete_cmd(
    slug: Annotated[str, typer.Argument(help="Slug of the post or page")],
    kind: KindOption = "posts",
    locale: LocaleOption = None,
    ):
    """Delete a document in every stored format."""
    content_kind = _kind(kind)
    repo = _repo(_settings())
    deleted = repo.delete_post(slug, locale) if content_kind is ContentKind.post else repo.delete_page(slug, locale)
    if not deleted:
        _fail(f"No {content_kind.name} with slug {slug!r}")
    typer.echo(f"Deleted {content_kind.name} {slug}")


def convert_cmd(
    path: Annotated[Path, typer.Argument(exists=True, readable=True, help="File to convert")],
    to: Annotated[str, typer.Option("--to", help="html or markdown")] = "html",
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write here instead of stdout")] = None,
    ):
    """Convert a Markdown file to HTML, or an HTML file to Markdown."""
    text = path.read_text(encoding="utf-8")
    if to == "html":
        result = markdown_to_html(text)
    elif to == "markdown":
        result = html_to_markdown(text)
    else:
        _fail(f"Unknown target {to!r}; expected 'html' or 'markdown'")
    if out:
        out.write_text(result, encoding="utf-8")
        typer.echo(f"  {path} -> {out}")
    else:
        typer.echo(result)


def migrate_cmd(
    kind: KindOption = "posts",
    locale: LocaleOption = None,
    ):
    """Rewrite stored JSON documents as Markdown with frontmatter."""
    content_kind = _kind(kind)
    repo = _repo(_settings())
    migrated = run_migrate(repo, content_kind, locale)
    for slug in migrated:
        typer.echo(f"  migrated: {slug}")
    typer.echo(f"Migrated {len(migrated)} {content_kind.value} to Markdown")


def export_cmd(
    out: Annotated[Path, typer.Argument(help="Backup file to write")],
    locales: Annotated[Optional[str], typer.Option("--locales", help="Comma-separated locales")] = None,
    ):
    """Write a JSON backup of all posts and pages."""
    settings = _settings(overrides={"locales": locales})
    repo = _repo(settings)
    backup = run_export(repo, settings.locales)
    out.write_text(json.dumps(backup, indent=2, ensure_ascii=False), encoding="utf-8")
    n_posts = sum(len(v) for v in backup["posts"].values())
    n_pages = sum(len(v) for v in backup["pages"].values())
    typer.echo(f"Exported {n_posts} posts and {n_pages} pages to {out}")


def import_cmd(
    path: Annotated[Path, typer.Argument(exists=True, readable=True, help="Backup file to restore")],
    ):
    """Restore posts and pages from a JSON backup."""
    repo = _repo(_settings())
    try:
        result = run_import(repo, json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValueError) as e:
        _fail("Import failed", e)
    for error in result["errors"]:
        typer.echo(f"  {error}", err=True)
    typer.echo(
        f"Imported {result['posts']} posts and {result['pages']} pages. "
        f"{len(result['errors'])} errors."
    )
