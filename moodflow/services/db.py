# async mongodb client for the moodflow api
# uses motor for non-blocking operations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from moodflow.config import settings

logger = logging.getLogger(__name__)


class Database:
    """async mongodb connection manager"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """establish connection to mongodb"""
        if self.client is not None:
            return

        logger.info(f"Connecting to MongoDB database: {settings.MONGODB_DATABASE}")
        self.client = AsyncIOMotorClient(settings.MONGODB_URI)
        self.db = self.client[settings.MONGODB_DATABASE]

        # verify connection
        await self.client.admin.command("ping")
        logger.info("MongoDB connection established")

    async def close(self):
        """close mongodb connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")

    # collection accessors

    @property
    def mood_logs(self):
        return self.db["mood_logs"]

    @property
    def crisis_assessments(self):
        return self.db["crisis_assessments"]

    @property
    def crisis_alerts(self):
        return self.db["crisis_alerts"]

    @property
    def notifications(self):
        return self.db["notifications"]

    @property
    def patients(self):
        return self.db["patients"]


# singleton instance
db = Database()


async def get_db() -> Database:
    """dependency injection for database access"""
    return db
