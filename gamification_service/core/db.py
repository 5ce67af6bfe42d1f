from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar
import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from gamification_service.core.config import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Transaction handle passed down to repositories: a session already inside begin()
Transaction = AsyncSession

# Base para modelos SQLAlchemy
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False, **pool_options) -> AsyncEngine:
    """Crea el engine async; convierte postgresql:// a postgresql+asyncpg://"""
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    # SQLite (tests/local) no acepta opciones de pool
    if not database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo, **pool_options)

    engine = create_async_engine(database_url, echo=echo)
    _use_immediate_transactions(engine)
    return engine


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """
    SQLite ignora SELECT ... FOR UPDATE. Cada transacción abre con
    BEGIN IMMEDIATE y toma el lock de escritura desde el inicio, así dos
    transacciones del mismo usuario se serializan igual que en PostgreSQL.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@lru_cache()
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return build_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


@lru_cache()
def get_session_factory() -> async_sessionmaker:
    return build_session_factory(get_engine())


async def run_in_transaction(
    fn: Callable[[Transaction], Awaitable[T]],
    session_factory: Optional[async_sessionmaker] = None,
) -> T:
    """
    Ejecuta fn dentro de una única transacción.

    Commit si fn retorna; rollback ante cualquier excepción, incluida la
    cancelación de la tarea. La excepción se propaga sin cambios.
    """
    factory = session_factory or get_session_factory()
    async with factory() as session:
        async with session.begin():
            return await fn(session)


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker,
    tx: Optional[Transaction] = None,
) -> AsyncIterator[Transaction]:
    """Reusa la transacción del llamador o abre una propia."""
    if tx is not None:
        yield tx
        return
    async with session_factory() as session:
        async with session.begin():
            yield session


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite devuelve datetimes naive; se interpretan como UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """Inicializa la base de datos creando todas las tablas"""
    from gamification_service import models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def close_db(engine: Optional[AsyncEngine] = None) -> None:
    """Cierra el engine de la base de datos"""
    engine = engine or get_engine()
    await engine.dispose()
