"""
Relational store client.

The ``Database`` value owns the async engine and the session factory. It is
constructed once at startup, stored on ``app.state.database`` and closed at
shutdown. Services receive it explicitly instead of reaching for a module
level engine.

Usage:
    async with database.session() as session:       # read scope
        ...
    async with database.transaction() as session:   # commit or roll back
        ...
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from db.base import Base

logger = structlog.get_logger(__name__)


class Database:
    """Async SQLAlchemy engine plus session factory with an explicit lifecycle."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not open. Call open() first.")
        return self._engine

    def open(self) -> None:
        """Create the engine and session factory. Safe to call twice."""
        if self._engine is not None:
            logger.warning("database_already_open")
            return

        connect_args = {"timeout": 15} if self.is_sqlite else {}
        self._engine = create_async_engine(
            self.url,
            echo=self.echo,
            pool_pre_ping=not self.is_sqlite,
            connect_args=connect_args,
        )

        if self.is_sqlite:
            # SQLite ignores foreign keys (and therefore ON DELETE CASCADE) unless asked
            @event.listens_for(self._engine.sync_engine, "connect")
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                try:
                    cursor.execute("PRAGMA foreign_keys=ON;")
                finally:
                    cursor.close()

        self._sessionmaker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("database_opened", dialect=self._engine.dialect.name)

    async def close(self) -> None:
        """Dispose of the connection pool."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("database_closed")

    async def create_all(self) -> None:
        """Create every table registered on the declarative base."""
        import models  # noqa: F401  (registers mappers)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    def _factory(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open. Call open() first.")
        return self._sessionmaker

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Plain session scope. Callers commit explicitly when they write."""
        async with self._factory()() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Unit of work scope.

        Commits when the block finishes, rolls back when it raises. The
        rollback completes before the exception propagates to the caller.
        """
        async with self._factory()() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the store client opened at startup."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request scoped session."""
    database = get_database(request)
    async with database.session() as session:
        yield session
