"""Shared fixtures for crud unit tests"""

from datetime import datetime, timezone

import pytest

from mdcms.crud.database import init_db, make_engine
from mdcms.crud.repository import ContentRepository
from mdcms.crud.sql_storage import SQLStorage
from mdcms.crud.storage import FileStorage, MemoryStorage


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="storage", params=["memory", "file", "sql"])
def storage_fixture(request, tmp_path):
    """Each storage backend in turn, empty."""
    if request.param == "memory":
        return MemoryStorage()
    if request.param == "file":
        return FileStorage(tmp_path)
    return SQLStorage(request.getfixturevalue("engine"))


@pytest.fixture(name="repo")
def repo_fixture():
    """Repository over in-memory storage with a fixed clock."""
    return ContentRepository(MemoryStorage(), clock=lambda: NOW)
