import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.config import Config

db_logger = logging.getLogger("db")

async_engine = create_async_engine(url=Config.CATALOG_DB_URL, pool_pre_ping=True)

async_session_factory = async_sessionmaker(
    bind=async_engine, class_=AsyncSession, expire_on_commit=False
)


async def init_db(engine: AsyncEngine = async_engine) -> None:
    """
    Creates the catalog tables if they do not exist yet.
    """
    # Imported for its side effect of registering the table metadata.
    from catalog.data.schemas import Problem  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    db_logger.info("Database schema ready")


async def close_db(engine: AsyncEngine = async_engine) -> None:
    await engine.dispose()
    db_logger.info("Database connections disposed")


async def ping_db(session_factory: async_sessionmaker = async_session_factory) -> bool:
    try:
        async with session_factory() as session:
            conn = await session.connection()
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        db_logger.error(f"Database ping failed: {e}")
        return False


def get_session_factory() -> async_sessionmaker:
    """
    Dependency returning the process-wide session factory for the catalog database.
    """
    return async_session_factory
