"""SQLModel-backed storage adapter: the key-value contract over a single table"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from mdcms.crud.storage import StorageAdapter, StorageError
from mdcms.crud.tables import StorageEntry


class SQLStorage(StorageAdapter):
    def __init__(self, engine: Engine):
        self.engine = engine

    def get(self, key: str) -> str | None:
        try:
            with Session(self.engine) as session:
                entry = session.get(StorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot read {key!r}: {e}") from e

    def set(self, key: str, value: str) -> bool:
        try:
            with Session(self.engine) as session:
                entry = session.get(StorageEntry, key) or StorageEntry(key=key, value=value)
                entry.value = value
                entry.updated_at = datetime.now()
                session.add(entry)
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot write {key!r}: {e}") from e
        return True

    def delete(self, key: str) -> bool:
        try:
            with Session(self.engine) as session:
                entry = session.get(StorageEntry, key)
                if entry is None:
                    return False
                session.delete(entry)
                session.commit()
                return True
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot delete {key!r}: {e}") from e

    def list(self, prefix: str) -> list[str]:
        try:
            with Session(self.engine) as session:
                keys = session.exec(
                    select(StorageEntry.key)
                    .where(col(StorageEntry.key).startswith(prefix, autoescape=True))
                    .order_by(StorageEntry.key)
                ).all()
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot list {prefix!r}: {e}") from e
        return [k[len(prefix):] for k in keys]
