import logging

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from comment_board.config import Settings
from comment_board.middleware import install_query_counter

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """
    Owns the async engine (and therefore the connection pool) plus the
    session factory handed to ``CommentStore``.

    One instance is built in the application lifespan and disposed on
    shutdown; nothing in the package holds a module-level engine.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        # Register the per-request SQL query counter on this engine.
        install_query_counter(engine)
        self.sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        url = make_url(settings.DATABASE_URL)
        kwargs: dict = {"echo": settings.DEBUG, "pool_pre_ping": True}
        # SQLite picks its own pool class; sizing only applies to servers.
        if url.get_backend_name() != "sqlite":
            kwargs.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_recycle=settings.DB_POOL_RECYCLE,
            )
        return cls(create_async_engine(url, **kwargs))

    async def create_all(self) -> None:
        """Create any missing tables (development convenience; Alembic in prod)."""
        # Make sure every model is registered on Base.metadata.
        import comment_board.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready")

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connection pool closed")
