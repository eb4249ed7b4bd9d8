from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from fastapi import HTTPException
from .settings import settings
import logging

logger = logging.getLogger(__name__)


class Database:
    client: AsyncIOMotorClient = None
    database: AsyncIOMotorDatabase = None


db = Database()


async def get_database() -> AsyncIOMotorDatabase:
    if db.database is None:
        raise HTTPException(
            status_code=503,
            detail="Catalog database is not available. Please check MongoDB configuration."
        )
    return db.database


async def connect_to_mongo():
    """Open the MongoDB client used by the catalog.

    A failed ping leaves the app running without a database; requests that
    need it get a 503 from get_database.
    """
    try:
        db.client = AsyncIOMotorClient(
            settings.mongodb_url,
            serverSelectionTimeoutMS=settings.MONGO_TIMEOUT_MS,
            appname=settings.APP_NAME,
        )
        db.database = db.client[settings.MONGO_DATABASE]

        await db.client.admin.command('ping')
        logger.info(f"Connected to MongoDB database '{settings.MONGO_DATABASE}' at {settings.MONGO_HOST}")

    except Exception as e:
        logger.error(f"Error connecting to MongoDB: {e}")
        db.client = None
        db.database = None


async def ping_database() -> bool:
    """True when the MongoDB server answers a ping"""
    if db.client is None:
        return False
    try:
        await db.client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False


async def close_mongo_connection():
    """Close database connection"""
    if db.client:
        db.client.close()
        db.client = None
        db.database = None
        logger.info("Disconnected from MongoDB")
