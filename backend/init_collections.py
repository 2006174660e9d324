#!/usr/bin/env python3
"""
Create the MongoDB collections and indexes used by the scheduling API
"""
import asyncio
import os
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

# (collection, keys, options)
INDEXES = [
    # Conflict checks load every schedule of one owner
    ("schedules", [("ownerId", 1), ("startDate", 1), ("endDate", 1)], {"name": "owner_dates"}),
    ("schedules", [("department", 1), ("startDate", 1)], {"name": "department_start"}),
    ("shift_swaps", [("requestingUserId", 1), ("status", 1)], {"name": "requester_status"}),
    ("shift_swaps", [("targetUserId", 1), ("status", 1)], {"name": "target_status"}),
    ("shift_swaps", [("status", 1), ("requestDate", -1)], {"name": "status_date"}),
    ("activity_logs", [("timestamp", -1)], {"name": "timestamp_desc"}),
]

async def ensure_collection(db, name):
    try:
        await db.create_collection(name)
        print(f"✅ Created {name} collection")
    except Exception as e:
        if "already exists" in str(e):
            print(f"ℹ️  {name} collection already exists")
        else:
            print(f"❌ Error creating {name} collection: {e}")

async def init_collections():
    load_dotenv()
    mongodb_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017/timesheet")
    client = AsyncIOMotorClient(mongodb_uri)
    db = client.get_default_database()

    print("🔧 Initializing MongoDB collections for scheduling...")

    for name in sorted({collection for collection, _, _ in INDEXES}):
        await ensure_collection(db, name)

    for collection, keys, options in INDEXES:
        try:
            await db[collection].create_index(keys, **options)
            print(f"✅ Created index {options['name']} on {collection}")
        except Exception as e:
            print(f"ℹ️  Index {options['name']} on {collection}: {e}")

    collections = await db.list_collection_names()
    print(f"\n📋 Available collections: {collections}")

    for name in ("schedules", "shift_swaps"):
        print(f"\n🔍 Indexes on {name}:")
        async for index in db[name].list_indexes():
            print(f"   - {index}")

    print("\n✅ MongoDB collections initialized successfully!")

    client.close()

if __name__ == "__main__":
    asyncio.run(init_collections())
