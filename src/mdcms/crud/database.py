"""Database engine creation and schema initialization for SQL storage"""

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from mdcms.crud import tables  # noqa: F401  (registers table metadata)


def make_engine(db_url: str) -> Engine:
    """Create an engine; in-memory SQLite URLs share one connection across threads."""
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        from sqlalchemy.pool import StaticPool
        return create_engine(db_url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(db_url, echo=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not yet exist."""
    SQLModel.metadata.create_all(engine)
