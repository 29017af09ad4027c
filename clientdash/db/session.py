from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from clientdash.core.config import settings, is_debug_mode
import logging
logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if is_debug_mode():
    logger.debug("Using database %s in debug mode", DATABASE_URL)

engine = create_async_engine(DATABASE_URL, future=True, echo=False)
SessionAsync = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(bind=None):
    """Create missing tables on the given engine (defaults to the app engine)."""
    from clientdash.db.base import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
