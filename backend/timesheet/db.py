import os
import logging
from motor.motor_asyncio import AsyncIOMotorClient

logger = logging.getLogger(__name__)

# Collections the API reads and writes
COLLECTIONS = ("schedules", "shift_swaps", "users", "activity_logs")

client = None
db = None

def init_db(app):
    """Connect to MONGODB_URI; the database name comes from the URI path."""
    global client, db
    uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017/timesheet")
    timeout_ms = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))
    client = AsyncIOMotorClient(uri, serverSelectionTimeoutMS=timeout_ms)
    db = client.get_default_database()
    app.state.db = db
    logger.info("Using MongoDB database %s", db.name)

    @app.on_event("shutdown")
    async def close_db():
        if client is not None:
            client.close()

def get_db():
    return db
