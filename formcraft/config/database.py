"""
Database configuration and connection management for MongoDB
"""
import logging
from motor.motor_asyncio import AsyncIOMotorClient
from typing import Optional

from formcraft.config.settings import settings
from formcraft.utils.errors import StoreError

logger = logging.getLogger(__name__)


class DatabaseConfig:
    """MongoDB database configuration"""

    def __init__(self, uri: Optional[str] = None, database_name: Optional[str] = None):
        self.MONGO_URI = uri if uri is not None else settings.STORE_CONNECTION_URI
        self.DATABASE_NAME = database_name or settings.DATABASE_NAME
        self.client: Optional[AsyncIOMotorClient] = None
        self.database = None

    async def connect_db(self) -> bool:
        """Connect to MongoDB, returning False instead of raising when it is unreachable"""
        if not self.MONGO_URI:
            logger.warning("⚠️ STORE_CONNECTION_URI not set, running on the volatile store only")
            return False
        try:
            self.client = AsyncIOMotorClient(
                self.MONGO_URI,
                serverSelectionTimeoutMS=int(settings.STORE_TIMEOUT_SECONDS * 1000),
            )
            self.database = self.client[self.DATABASE_NAME]
            # Test connection
            await self.client.admin.command('ping')
            logger.info("✅ Connected to MongoDB: %s", self.DATABASE_NAME)
            return True
        except Exception as e:
            # The client stays around so the supervisor can probe for recovery later
            logger.error("❌ Error connecting to MongoDB: %s", e)
            return False

    async def close_db(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("✅ MongoDB connection closed")

    def get_collection(self, collection_name: str):
        """Get a specific collection"""
        if self.database is None:
            raise StoreError("Database not connected")
        return self.database[collection_name]


# Global database instance
db_config = DatabaseConfig()


# Collection names
class Collections:
    USERS = "users"
    FORMS = "forms"
    SUBMISSIONS = "submissions"
