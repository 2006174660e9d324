from datetime import date, datetime, time
from typing import List, Optional

from bson import ObjectId

from timesheet.db import get_db
from timesheet.models.schedule import Schedule

import logging

logger = logging.getLogger(__name__)

DATE_FIELDS = ("startDate", "endDate")


def _object_id(schedule_id: str) -> Optional[ObjectId]:
    return ObjectId(schedule_id) if ObjectId.is_valid(schedule_id) else None


def to_document(values: dict) -> dict:
    """Convert schedule fields into BSON-friendly values (no date, no Enum)."""
    doc = dict(values)
    for field in DATE_FIELDS:
        if isinstance(doc.get(field), date) and not isinstance(doc[field], datetime):
            doc[field] = datetime.combine(doc[field], time.min)
    if "days" in doc and doc["days"] is not None:
        doc["days"] = [getattr(day, "value", day) for day in doc["days"]]
    if "type" in doc and doc["type"] is not None:
        doc["type"] = getattr(doc["type"], "value", doc["type"])
    return doc


def from_document(doc: dict) -> Schedule:
    doc = dict(doc)
    doc["_id"] = str(doc["_id"])
    for field in DATE_FIELDS:
        if isinstance(doc.get(field), datetime):
            doc[field] = doc[field].date()
    return Schedule(**doc)


class ScheduleStore:
    """Motor-backed persistence for schedules."""

    def __init__(self, db):
        self.collection = db["schedules"]

    async def get(self, schedule_id: str) -> Optional[Schedule]:
        oid = _object_id(schedule_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        return from_document(doc) if doc else None

    async def list_for_owner(self, owner_id: str, active_only: bool = True) -> List[Schedule]:
        query = {"ownerId": owner_id}
        if active_only:
            query["isActive"] = {"$ne": False}
        docs = await self.collection.find(query).sort("startDate", 1).to_list(None)
        return [from_document(doc) for doc in docs]

    async def list_upcoming_for_owner(self, owner_id: str, today: date) -> List[Schedule]:
        """Active schedules of one owner that have not ended before ``today``."""
        docs = await self.collection.find({
            "ownerId": owner_id,
            "isActive": {"$ne": False},
            "endDate": {"$gte": datetime.combine(today, time.min)},
        }).sort("startDate", 1).to_list(None)
        return [from_document(doc) for doc in docs]

    async def search(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        department: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> List[Schedule]:
        query = {}
        if start_date and end_date:
            # Any schedule whose range intersects the requested window
            query["startDate"] = {"$lte": datetime.combine(end_date, time.min)}
            query["endDate"] = {"$gte": datetime.combine(start_date, time.min)}
        if department:
            query["department"] = department
        if owner_id:
            query["ownerId"] = owner_id
        docs = await self.collection.find(query).sort("startDate", 1).to_list(None)
        return [from_document(doc) for doc in docs]

    async def insert(self, schedule: Schedule) -> Schedule:
        doc = to_document(schedule.dict(exclude={"id"}))
        result = await self.collection.insert_one(doc)
        return schedule.model_copy(update={"id": str(result.inserted_id)})

    async def update(self, schedule_id: str, changes: dict) -> Optional[Schedule]:
        oid = _object_id(schedule_id)
        if oid is None:
            return None
        await self.collection.update_one({"_id": oid}, {"$set": to_document(changes)})
        return await self.get(schedule_id)

    async def delete(self, schedule_id: str) -> bool:
        oid = _object_id(schedule_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def exchange_owners(self, first: Schedule, second: Schedule, updated_by: str, now: datetime) -> bool:
        """Give each schedule the other's owner (enacts an approved swap).

        Each update only matches while the schedule still has the owner that
        was read. If the second one no longer matches, the first is moved
        back and False is returned, so the pair is never left half swapped.
        """
        moved = await self.collection.update_one(
            {"_id": ObjectId(first.id), "ownerId": first.ownerId},
            {"$set": {"ownerId": second.ownerId, "updatedBy": updated_by, "updatedAt": now}},
        )
        if moved.matched_count == 0:
            logger.warning("Schedule %s changed owner before the swap could be enacted", first.id)
            return False

        swapped = await self.collection.update_one(
            {"_id": ObjectId(second.id), "ownerId": second.ownerId},
            {"$set": {"ownerId": first.ownerId, "updatedBy": updated_by, "updatedAt": now}},
        )
        if swapped.matched_count == 0:
            logger.warning("Schedule %s changed owner before the swap could be enacted", second.id)
            await self.collection.update_one(
                {"_id": ObjectId(first.id), "ownerId": second.ownerId},
                {"$set": {"ownerId": first.ownerId, "updatedBy": updated_by, "updatedAt": now}},
            )
            return False

        logger.info("Exchanged owners of schedules %s and %s", first.id, second.id)
        return True


def get_schedule_store() -> ScheduleStore:
    return ScheduleStore(get_db())
