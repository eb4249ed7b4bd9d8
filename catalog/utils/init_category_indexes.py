"""
Initialize database indexes for categories collection
"""
import asyncio
import logging
from catalog.config.database import get_database, connect_to_mongo, close_mongo_connection
from catalog.services.category_store import CategoryStore

logger = logging.getLogger(__name__)


async def init_category_indexes():
    """Initialize database indexes for categories collection"""
    logger.info("Initializing categories collection indexes...")

    db = await get_database()

    # (level, isActive, sortOrder) for per-level listings,
    # (parent, isActive, sortOrder) for children lookups,
    # (name, level) for name searches; names are not unique
    await CategoryStore(db).ensure_indexes()

    logger.info("Categories collection indexes created successfully")


async def main():
    await connect_to_mongo()
    try:
        await init_category_indexes()
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
