from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


async def init_db(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create and return an async SQLAlchemy engine.

    Connection pool sizing only applies to server databases; SQLite URLs
    (used for local runs) get the driver's default pool.
    """
    pool_kwargs: dict = {}
    if not make_url(database_url).get_backend_name().startswith("sqlite"):
        pool_kwargs = {"pool_size": 10, "max_overflow": 20, "pool_pre_ping": True}
    return create_async_engine(database_url, echo=echo, **pool_kwargs)


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create and return an async session factory bound to the given engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def close_db(engine: AsyncEngine) -> None:
    """Dispose of the async engine and release all connections."""
    await engine.dispose()
