from fastapi import APIRouter, HTTPException
from datetime import datetime
import os
from timesheet.db import get_db, COLLECTIONS

router = APIRouter()

def _timestamp() -> str:
    return datetime.utcnow().isoformat()

async def _database_check() -> dict:
    try:
        db = get_db()
        await db.command("ping")
        existing = set(await db.list_collection_names())
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    missing = [name for name in COLLECTIONS if name not in existing]
    if missing:
        # Collections are created lazily; init_collections.py adds indexes
        return {"status": "healthy", "missingCollections": missing}
    return {"status": "healthy"}

@router.get("/health")
async def health_check():
    """
    Service status with database and rate limiter details
    """
    database = await _database_check()
    health_status = {
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "timestamp": _timestamp(),
        "version": "1.0.0",
        "checks": {
            "database": database,
            "rateLimiter": {
                "enabled": os.getenv("DISABLE_RATE_LIMIT", "0") != "1",
                "backend": "redis" if os.getenv("REDIS_URL") else "memory",
            },
        },
    }
    # 200 even when degraded so the body can carry the details
    return health_status

@router.get("/health/ready")
async def readiness_check():
    """
    Ready once MongoDB answers
    """
    database = await _database_check()
    if database["status"] != "healthy":
        raise HTTPException(
            status_code=503,
            detail={"status": "not_ready", "timestamp": _timestamp(), "error": database["error"]},
        )
    return {"status": "ready", "timestamp": _timestamp()}

@router.get("/health/live")
async def liveness_check():
    return {"status": "alive", "timestamp": _timestamp()}
