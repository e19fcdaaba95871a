"""
SQLAlchemy async engine and session management

The Database object owns one engine and its session maker. It is created by the
DI container (or directly by tests) and handed to the Unit of Work factory, so two
Database instances never share connections or state.

SQLite urls (used by the test-suite through aiosqlite) get a NullPool so every
Unit of Work opens its own connection, the same way concurrent requests would
against PostgreSQL.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from src.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


class Database:
    def __init__(
        self,
        *,
        url: str,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
        pool_pre_ping: bool = True,
    ) -> None:
        self.url = url
        if url.startswith('sqlite'):
            self._engine = create_async_engine(
                url,
                echo=echo,
                poolclass=NullPool,
                connect_args={'timeout': 30},
            )
            self._serialize_sqlite_writers()
        else:
            self._engine = create_async_engine(
                url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                pool_pre_ping=pool_pre_ping,
            )
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def _serialize_sqlite_writers(self) -> None:
        # The driver only BEGINs before DML, so a read-then-write UoW would hold a
        # SHARED lock while asking for RESERVED and deadlock against a second writer.
        # BEGIN IMMEDIATE takes the write lock up front and queues writers instead.
        sync_engine = self._engine.sync_engine

        @event.listens_for(sync_engine, 'connect')
        def _disable_driver_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(sync_engine, 'begin')
        def _begin_immediate(conn):
            conn.exec_driver_sql('BEGIN IMMEDIATE')

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all tables registered on Base if they don't exist"""
        # Models register themselves on Base.metadata at import time
        import src.service.ticketing.driven_adapter.model  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info(f'🗄️  [DB] Tables ensured ({len(Base.metadata.tables)} tables)')

    async def dispose(self) -> None:
        await self._engine.dispose()
