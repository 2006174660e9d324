from typing import List, Optional

from bson import ObjectId

from timesheet.db import get_db
from timesheet.models.shift_swap import SwapRequest


def _to_document(swap: SwapRequest) -> dict:
    doc = swap.dict(exclude={"id"})
    doc["status"] = swap.status.value
    return doc


def _from_document(doc: dict) -> SwapRequest:
    doc = dict(doc)
    doc["_id"] = str(doc["_id"])
    return SwapRequest(**doc)


class SwapStore:
    """Motor-backed persistence for shift swap requests.

    ``compare_and_set`` is the only write path for transitions so that two
    concurrent answers (or approvals) cannot both succeed.
    """

    def __init__(self, db):
        self.collection = db["shift_swaps"]

    async def get(self, swap_id: str) -> Optional[SwapRequest]:
        if not ObjectId.is_valid(swap_id):
            return None
        doc = await self.collection.find_one({"_id": ObjectId(swap_id)})
        return _from_document(doc) if doc else None

    async def insert(self, swap: SwapRequest) -> SwapRequest:
        result = await self.collection.insert_one(_to_document(swap))
        return swap.model_copy(update={"id": str(result.inserted_id)})

    async def list_for_user(self, user_id: str) -> List[SwapRequest]:
        docs = await self.collection.find({
            "$or": [{"requestingUserId": user_id}, {"targetUserId": user_id}]
        }).sort("requestDate", -1).to_list(None)
        return [_from_document(doc) for doc in docs]

    async def list_for_department(self, department: Optional[str] = None) -> List[SwapRequest]:
        query = {"department": department} if department else {}
        docs = await self.collection.find(query).sort("requestDate", -1).to_list(None)
        return [_from_document(doc) for doc in docs]

    async def compare_and_set(self, previous: SwapRequest, updated: SwapRequest) -> bool:
        """Persist ``updated`` only if the stored state still matches ``previous``."""
        expected = {
            "_id": ObjectId(previous.id),
            "status": previous.status.value,
            # None also matches a missing field
            "managerApproval": None if previous.managerApproval is None else {"$ne": None},
        }
        changes = _to_document(updated)
        result = await self.collection.update_one(expected, {"$set": changes})
        return result.modified_count > 0


def get_swap_store() -> SwapStore:
    return SwapStore(get_db())
