"""Database engine and session management.

The ``Database`` object is built once when the application starts, its
``init_models`` step creates the schema, and it is then handed to the
repository that needs it.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Import models so they are attached to Base.metadata before table creation
from app.models import Base

logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""

    parsed = make_url(url)
    if not parsed.get_backend_name().startswith("sqlite"):
        return

    database = parsed.database
    if not database or database == ":memory:":
        return

    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class Database:
    """Async SQLAlchemy engine plus the session factory bound to it."""

    def __init__(self, url: str, *, echo: bool = False, pooled: bool = True) -> None:
        self._url = url
        _ensure_sqlite_directory(url)

        engine_options: dict[str, Any] = {
            "echo": echo,
            "future": True,
        }
        if not pooled:
            engine_options["poolclass"] = NullPool

        self._engine: AsyncEngine = create_async_engine(url, **engine_options)
        self._session_factory = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )

    @property
    def url(self) -> str:
        return self._url

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Async context manager that yields a configured SQLAlchemy session."""

        async with self._session_factory() as session:
            yield session

    async def init_models(self) -> None:
        """Create database tables if they do not exist."""

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database initialized: %s", make_url(self._url).render_as_string(hide_password=True))

    async def dispose(self) -> None:
        """Dispose of the engine and release pooled connections."""

        await self._engine.dispose()


__all__ = ["Database"]
