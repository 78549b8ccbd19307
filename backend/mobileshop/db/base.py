"""SQLAlchemy engine/session setup and document store selection."""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from mobileshop.core.config import Settings


class Base(DeclarativeBase):
    pass


@lru_cache
def get_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, pool_pre_ping=True)


def get_session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(database_url), expire_on_commit=False)


def build_store(config: Settings):
    """Pick the document store implementation configured for this process."""
    from mobileshop.db.store import InMemoryDocumentStore
    from mobileshop.db.sql_store import SqlDocumentStore

    if config.STORE_BACKEND == "sql":
        return SqlDocumentStore(get_session_factory(config.DATABASE_URL))
    if config.STORE_BACKEND == "memory":
        return InMemoryDocumentStore()
    raise ValueError(f"Unknown STORE_BACKEND '{config.STORE_BACKEND}'")
