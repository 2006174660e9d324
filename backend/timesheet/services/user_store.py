from typing import List, Optional

from bson import ObjectId

from timesheet.db import get_db
from timesheet.models.user import Actor

# Fields a colleague may see when picking someone to swap with
COLLEAGUE_FIELDS = {"_id": 1, "firstName": 1, "lastName": 1, "email": 1, "position": 1}


class UserStore:
    def __init__(self, db):
        self.collection = db["users"]

    async def find_user(self, user_id: str) -> Optional[dict]:
        # Seeded users keep string ids, newer ones use ObjectId
        user = await self.collection.find_one({"_id": user_id})
        if user is None and ObjectId.is_valid(user_id):
            user = await self.collection.find_one({"_id": ObjectId(user_id)})
        return user

    async def get_actor(self, user_id: str) -> Optional[Actor]:
        user = await self.find_user(user_id)
        return Actor.from_user_doc(user) if user else None

    async def list_colleagues(self, department: str, exclude_user_id: str) -> List[dict]:
        """Users of ``department`` other than ``exclude_user_id``, by last name."""
        # Department references may be stored as ObjectId or as plain strings
        departments = [department]
        if ObjectId.is_valid(department):
            departments.append(ObjectId(department))
        docs = await self.collection.find(
            {"department": {"$in": departments}, "isActive": {"$ne": False}},
            COLLEAGUE_FIELDS,
        ).sort("lastName", 1).to_list(None)
        colleagues = []
        for doc in docs:
            doc["_id"] = str(doc["_id"])
            if doc["_id"] != exclude_user_id:
                colleagues.append(doc)
        return colleagues


def get_user_store() -> UserStore:
    return UserStore(get_db())
