from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from .config import get_settings

_settings = get_settings()
_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None

async def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        _client = AsyncIOMotorClient(_settings.mongodb_uri)
        _db = _client[_settings.db_name]
        # Índices que usan las consultas del motor de disponibilidad
        await _db.bookings.create_index([("announcer_id", 1), ("category_slug", 1), ("status", 1)])
        await _db.bookings.create_index([("announcer_id", 1), ("start_date", 1), ("end_date", 1)])
        await _db.availability.create_index([("announcer_id", 1), ("date", 1)], unique=True)
        await _db.profiles.create_index("user_id", unique=True)
        await _db.service_categories.create_index("slug", unique=True)
        await _db.service_categories.create_index([("parent_slug", 1)])
        await _db.booking_locks.create_index("announcer_id", unique=True)
    return _db
