# database.py
import logging
import os

import pymongo
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

load_dotenv()

logger = logging.getLogger(__name__)

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "event_hub")
client = AsyncIOMotorClient(MONGO_URI, tz_aware=True)
db = client[MONGO_DB_NAME]

#tables
users_collection = db["users"]
events_collection = db["events"]


async def create_indexes():
    """
    Create database indexes for optimal query performance.
    This should be called once at application startup.
    """
    try:
        # Users collection indexes
        await users_collection.create_index("email", unique=True)
        await users_collection.create_index("role")
        await users_collection.create_index([("is_active", 1), ("created_at", -1)])

        # Events collection indexes
        await events_collection.create_index([("status", 1), ("start_date", 1)])
        await events_collection.create_index("categories")
        await events_collection.create_index("is_featured")
        await events_collection.create_index([("location.city", 1), ("location.country", 1)])
        # Text index backing the free-text search
        await events_collection.create_index(
            [("title", pymongo.TEXT), ("description", pymongo.TEXT), ("tags", pymongo.TEXT)],
            name="event_text_search",
        )

        logger.info("Database indexes created successfully")
    except Exception as e:
        logger.warning(f"Error creating indexes: {e}")
        # Don't raise - allow app to continue if indexes already exist
