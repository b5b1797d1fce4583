"""Key-value storage adapters: abstract contract, filesystem and in-memory backends"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from mdcms.config import Settings


class StorageError(Exception):
    """Raised by adapters when the backend cannot be read or written."""


class StorageAdapter(ABC):
    """String keys (relative paths such as content/posts/en/hello.md) mapped to text values."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key does not exist."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key. Returns False if it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def list(self, prefix: str) -> list[str]:
        """Return sorted keys under prefix, relative to it (nested keys keep their '/')."""
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        return self.get(key) is not None


@dataclass
class MemoryStorage(StorageAdapter):
    _data: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def list(self, prefix: str) -> list[str]:
        return sorted(k[len(prefix):] for k in self._data if k.startswith(prefix))


class FileStorage(StorageAdapter):
    """Store each key as a UTF-8 file below root."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        base = self.root.resolve()
        candidate = (base / key).resolve()
        if candidate != base and base not in candidate.parents:
            raise StorageError(f"Key {key!r} is outside of storage root {self.root}")
        return candidate

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read {key!r}: {e}") from e

    def set(self, key: str, value: str) -> bool:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot write {key!r}: {e}") from e
        return True

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Cannot delete {key!r}: {e}") from e
        return True

    def list(self, prefix: str) -> list[str]:
        directory = self._path(prefix)
        if not directory.is_dir():
            return []
        try:
            return sorted(p.relative_to(directory).as_posix() for p in directory.rglob("*") if p.is_file())
        except OSError as e:
            raise StorageError(f"Cannot list {prefix!r}: {e}") from e


def make_storage(settings: "Settings") -> StorageAdapter:
    """Build the storage backend selected by settings.storage_backend."""
    if settings.storage_backend == "sql":
        from mdcms.crud.database import init_db, make_engine
        from mdcms.crud.sql_storage import SQLStorage

        engine = make_engine(settings.db_url)
        init_db(engine)
        return SQLStorage(engine)
    return FileStorage(Path(settings.content_dir))
