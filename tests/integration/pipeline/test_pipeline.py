"""Integration tests for backup export/import and JSON-to-Markdown migration

Documents are written through the repository into in-memory storage, then
run_export / run_import / run_migrate are checked against the stored keys.
"""

from datetime import datetime, timezone

import pytest

from mdcms.core.models import ContentKind, Page, Post, PostStatus
from mdcms.core.pipeline import BACKUP_VERSION, run_export, run_import, run_migrate
from mdcms.crud.repository import ContentRepository
from mdcms.crud.storage import MemoryStorage


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(name="repo")
def repo_fixture():
    return ContentRepository(MemoryStorage(), clock=lambda: NOW)


@pytest.fixture(name="populated")
def populated_fixture(repo):
    """Legacy and 'en' content, including a draft and a future post."""
    repo.save_post(Post(id="1", title="Live", slug="live", date="2024-05-01"))
    repo.save_post(Post(id="2", title="Draft", slug="draft", date="2024-05-02", status="draft"))
    repo.save_post(Post(
        id="3", title="Later", slug="later", date="2024-05-03",
        status="scheduled", scheduled_date="2099-01-01T00:00:00Z",
    ))
    repo.save_post(Post(id="4", title="Hallo", slug="hallo", date="2024-05-04"), "en")
    repo.save_page(Page(id="5", title="About", slug="about"))
    return repo


# --- export ---

def test_export_legacy_scope(populated):
    backup = run_export(populated, [], now=NOW)
    assert backup["version"] == BACKUP_VERSION
    assert backup["exportedAt"] == "2024-06-01T12:00:00.000Z"
    assert [p["slug"] for p in backup["posts"]["default"]] == ["later", "draft", "live"]
    assert [p["slug"] for p in backup["pages"]["default"]] == ["about"]


def test_export_uses_camel_case_keys(populated):
    later = next(p for p in run_export(populated, [])["posts"]["default"] if p["slug"] == "later")
    assert later["scheduledDate"] == "2099-01-01T00:00:00Z"
    assert later["updatedAt"] == "2024-06-01T12:00:00.000Z"


def test_export_per_locale(populated):
    backup = run_export(populated, ["en", "fr"], now=NOW)
    assert set(backup["posts"]) == {"en", "fr"}
    assert [p["slug"] for p in backup["posts"]["en"]] == ["hallo"]
    assert backup["posts"]["fr"] == []
    assert backup["pages"]["en"] == []


# --- import ---

def test_import_assigns_defaults(repo):
    result = run_import(repo, {
        "posts": {"en": [{"slug": "hi", "title": "Hi", "date": "2024-01-01"}]},
        "pages": {"default": [{"slug": "about", "title": "About", "id": "keep-me"}]},
    })
    assert result == {"posts": 1, "pages": 1, "errors": []}
    post = repo.get_post("hi", "en")
    assert post.id == "en-hi"
    assert post.status is PostStatus.published
    assert repo.get_page("about").id == "keep-me"


def test_import_skips_incomplete_items(repo):
    result = run_import(repo, {
        "posts": {"default": [{"title": "No slug"}, {"slug": "no-title"}, "junk", {"slug": "ok", "title": "Ok"}]},
    })
    assert result["posts"] == 1
    assert result["pages"] == 0
    assert len(result["errors"]) == 3
    assert repo.get_post("ok") is not None


def test_import_reports_invalid_sections(repo):
    result = run_import(repo, {"posts": ["not", "a", "mapping"], "pages": {"en": "nope"}})
    assert result["posts"] == 0
    assert result["pages"] == 0
    assert result["errors"] == ["Invalid posts section", "Invalid pages format for locale en"]


def test_import_reports_invalid_documents(repo):
    result = run_import(repo, {"posts": {"default": [{"slug": "x", "title": "X", "status": "bogus"}]}})
    assert result["posts"] == 0
    assert result["errors"][0].startswith("Error importing post x in locale default")


def test_import_rejects_non_mapping(repo):
    with pytest.raises(ValueError, match="Invalid backup format"):
        run_import(repo, ["not", "a", "backup"])


def test_export_import_round_trip(populated):
    """A backup restored into empty storage reproduces every post and page."""
    backup = run_export(populated, [], now=NOW)
    backup["posts"]["en"] = run_export(populated, ["en"], now=NOW)["posts"]["en"]

    target = ContentRepository(MemoryStorage(), clock=lambda: NOW)
    result = run_import(target, backup)
    assert result["errors"] == []
    assert result["posts"] == 4
    assert result["pages"] == 1
    assert target.get_page("about").id == "5"
    restored = target.get_all_posts(include_drafts=True, include_scheduled=True)
    assert [p.slug for p in restored] == ["later", "draft", "live"]
    assert target.get_post("later").status is PostStatus.scheduled
    assert target.get_post("hallo", "en").title == "Hallo"


# --- migrate ---

def test_migrate_converts_html_json_to_markdown(repo):
    repo.save_post(Post(
        id="1", title="Html", slug="html", date="2024-01-01",
        content="<h2>Intro</h2><p>Some <strong>bold</strong> &amp;amp; more</p>",
    ))
    assert run_migrate(repo, ContentKind.post) == ["html"]

    assert repo.storage.list("content/posts/") == ["html.md"]
    post = repo.get_post("html")
    assert post.content == "## Intro\n\nSome **bold** & more"
    assert post.id == "1"


def test_migrate_is_scoped_to_locale(repo):
    repo.save_page(Page(id="1", title="A", slug="a", content="<p>x</p>"), "en")
    repo.save_page(Page(id="2", title="B", slug="b", content="<p>y</p>"))
    assert run_migrate(repo, ContentKind.page, "en") == ["a"]
    assert repo.storage.list("content/pages/") == ["b.json", "en/a.md"]


def test_migrate_skips_markdown_and_corrupt_files(repo):
    repo.save_post(Post(id="1", title="Md", slug="md", date="2024-01-01"), fmt="markdown")
    repo.storage.set("content/posts/bad.json", "{oops")
    assert run_migrate(repo, ContentKind.post) == []
    assert repo.storage.exists("content/posts/bad.json")
