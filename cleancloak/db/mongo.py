# cleancloak/db/mongo.py
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from cleancloak.core.config import settings
from cleancloak.core.logger import get_logger

logger = get_logger("mongo")

client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
db = client[settings.MONGODB_DB]

# Collection names
USERS = "users"
CLEANER_PROFILES = "cleaner_profiles"
TRACKINGS = "trackings"
BOOKINGS = "bookings"


async def verify_mongodb_connection(database: AsyncIOMotorDatabase = db) -> bool:
    try:
        await database.command("ping")
        logger.info("MongoDB connection established")
        return True
    except Exception as e:
        logger.error(f"MongoDB connection failed: {e}")
        return False


async def ensure_indexes(database: AsyncIOMotorDatabase = db) -> None:
    """Unique indexes back the phone and one-profile-per-user rules."""
    await database[USERS].create_index([("phone", ASCENDING)], unique=True)
    await database[USERS].create_index([("name", ASCENDING)])
    await database[CLEANER_PROFILES].create_index([("user", ASCENDING)], unique=True)
    await database[CLEANER_PROFILES].create_index(
        [("approval_status", ASCENDING), ("created_at", DESCENDING)]
    )
    await database[CLEANER_PROFILES].create_index(
        [("rating", DESCENDING), ("completed_jobs", DESCENDING)]
    )
    await database[TRACKINGS].create_index([("booking", ASCENDING)], unique=True)


async def get_db() -> AsyncIOMotorDatabase:
    return db
