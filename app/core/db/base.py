from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings
from app.core.logging import get_logger


logger = get_logger(__name__)

Base = declarative_base()

engine = create_async_engine(
    str(settings.postgres.connection_string),
    echo=settings.app.is_testing is True,
    pool_pre_ping=True,
)

# Rows stay readable after commit; routes serialize them once the store returns
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Request-scoped session: commit after the route, roll back on any error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Session rolled back due to error: {e}")
            raise
