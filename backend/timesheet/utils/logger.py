import logging
from datetime import datetime
from timesheet.db import get_db
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

async def log_event(
    action: str,
    details: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    ip_address: Optional[str] = None
):
    """
    Log an event to both the application logger and the activity log collection
    """
    try:
        log_message = f"Action: {action}"
        if user_id:
            log_message += f" | User: {user_id}"
        if details:
            log_message += f" | Details: {details}"

        logger.info(log_message)

        db = get_db()
        if db is None:
            return

        await db["activity_logs"].insert_one({
            "action": action,
            "details": details or {},
            "userId": user_id,
            "timestamp": datetime.utcnow(),
            "ipAddress": ip_address
        })

    except Exception as e:
        # Don't let logging errors break the application
        logger.error(f"Failed to log event: {e}")

def log_warning(message: str, user_id: Optional[str] = None):
    warning_message = f"Warning: {message}"
    if user_id:
        warning_message += f" | User: {user_id}"

    logger.warning(warning_message)

# Event type constants for consistency
class EventTypes:
    SCHEDULE_CREATED = "schedule_created"
    SCHEDULE_UPDATED = "schedule_updated"
    SCHEDULE_DELETED = "schedule_deleted"
    SCHEDULE_REJECTED = "schedule_rejected"

    SHIFT_SWAP_REQUESTED = "shift_swap_requested"
    SHIFT_SWAP_RESPONDED = "shift_swap_responded"
    SHIFT_SWAP_MANAGER_DECISION = "shift_swap_manager_decision"
    SHIFT_SWAP_CANCELLED = "shift_swap_cancelled"
    SHIFT_SWAP_ENACTED = "shift_swap_enacted"
