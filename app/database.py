"""Remote MongoDB connection manager."""

from motor.motor_asyncio import AsyncIOMotorClient
from typing import Optional

from app.config import settings
from app.core.logging import logger
from app.sync.remote import MongoRemoteBackend


class Database:
    """MongoDB database connection manager."""
    
    client: Optional[AsyncIOMotorClient] = None
    
    @classmethod
    async def connect_db(cls) -> MongoRemoteBackend:
        """Connect to MongoDB and return the remote backend over it."""
        cls.client = AsyncIOMotorClient(settings.MONGODB_URL)
        logger.info(f"Connected to MongoDB database: {settings.DATABASE_NAME}")
        return MongoRemoteBackend(cls.client, settings.DATABASE_NAME)
    
    @classmethod
    async def close_db(cls):
        """Close MongoDB connection."""
        if cls.client:
            cls.client.close()
            cls.client = None
            logger.info("Closed MongoDB connection")
