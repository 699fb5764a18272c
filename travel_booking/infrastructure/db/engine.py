from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from travel_booking.config import Settings
from travel_booking.infrastructure.db.tables import metadata


def _emit_sqlite_begin(engine: AsyncEngine) -> None:
    """El driver de SQLite no emite BEGIN antes de un SAVEPOINT; lo hacemos nosotros."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(settings: Settings) -> AsyncEngine:
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is required for SQL mode")
    is_sqlite = settings.database_url.startswith("sqlite")
    options = {"echo": settings.db_echo, "pool_pre_ping": True}
    if not is_sqlite:
        options["pool_recycle"] = 3600
    engine = create_async_engine(settings.database_url, **options)
    if is_sqlite:
        _emit_sqlite_begin(engine)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
