"""Unit tests for crud/storage.py and crud/sql_storage.py"""

import pytest

from mdcms.config import Settings
from mdcms.crud.sql_storage import SQLStorage
from mdcms.crud.storage import FileStorage, StorageError, make_storage


def test_set_get_exists(storage):
    assert storage.get("content/posts/a.json") is None
    assert not storage.exists("content/posts/a.json")
    assert storage.set("content/posts/a.json", '{"x": 1}') is True
    assert storage.get("content/posts/a.json") == '{"x": 1}'
    assert storage.exists("content/posts/a.json")


def test_set_overwrites(storage):
    storage.set("k/a.md", "one")
    storage.set("k/a.md", "two")
    assert storage.get("k/a.md") == "two"


def test_delete(storage):
    storage.set("k/a.md", "x")
    assert storage.delete("k/a.md") is True
    assert storage.get("k/a.md") is None
    assert storage.delete("k/a.md") is False


def test_list_is_relative_and_sorted(storage):
    """Keys come back relative to the prefix; nested keys keep their path."""
    storage.set("content/posts/b.md", "b")
    storage.set("content/posts/a.json", "a")
    storage.set("content/posts/en/c.md", "c")
    storage.set("content/pages/p.json", "p")
    assert storage.list("content/posts/") == ["a.json", "b.md", "en/c.md"]


def test_list_missing_prefix(storage):
    assert storage.list("content/nothing/") == []


def test_values_keep_unicode(storage):
    storage.set("k/u.md", "héllo 世界 ✓")
    assert storage.get("k/u.md") == "héllo 世界 ✓"


def test_file_storage_writes_under_root(tmp_path):
    storage = FileStorage(tmp_path)
    storage.set("content/posts/en/a.md", "body")
    assert (tmp_path / "content" / "posts" / "en" / "a.md").read_text(encoding="utf-8") == "body"


@pytest.mark.parametrize("key", ["../escape.md", "content/../../escape.md"])
def test_file_storage_rejects_keys_outside_root(tmp_path, key):
    storage = FileStorage(tmp_path / "root")
    with pytest.raises(StorageError):
        storage.set(key, "x")
    with pytest.raises(StorageError):
        storage.get(key)


def test_file_storage_read_error_is_wrapped(tmp_path):
    """OS-level failures surface as StorageError."""
    storage = FileStorage(tmp_path)
    (tmp_path / "bad.md").write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(StorageError):
        storage.get("bad.md")


def test_sql_list_escapes_like_wildcards(engine):
    storage = SQLStorage(engine)
    storage.set("a_b/x.md", "1")
    storage.set("axb/y.md", "2")
    assert storage.list("a_b/") == ["x.md"]


def test_make_storage_file(tmp_path):
    storage = make_storage(Settings(content_dir=str(tmp_path)))
    assert isinstance(storage, FileStorage)
    assert storage.root == tmp_path


def test_make_storage_sql():
    storage = make_storage(Settings(storage_backend="sql", db_url="sqlite://"))
    assert isinstance(storage, SQLStorage)
    storage.set("k/a.md", "x")
    assert storage.list("k/") == ["a.md"]
