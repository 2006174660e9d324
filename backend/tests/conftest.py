# tests/conftest.py
import os
from datetime import date, datetime

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

os.environ["SECRET_KEY"] = "testing_secret_key_for_development_only"
os.environ["DISABLE_RATE_LIMIT"] = "1"

import timesheet.db
from main import app
from timesheet.models.schedule import Schedule
from timesheet.models.user import Actor
from timesheet.scheduling.overlap import date_ranges_overlap
from timesheet.services.schedule_store import get_schedule_store
from timesheet.services.swap_store import get_swap_store
from timesheet.services.user_store import get_user_store
from timesheet.utils.auth import get_current_user
from timesheet.utils.clock import get_clock

# A Monday morning; schedules in the tests start the following week
NOW = datetime(2025, 3, 3, 9, 0)


class FakeScheduleStore:
    def __init__(self):
        self.items = {}

    async def get(self, schedule_id):
        return self.items.get(schedule_id)

    async def list_for_owner(self, owner_id, active_only=True):
        return [
            s for s in self.items.values()
            if s.ownerId == owner_id and (s.isActive or not active_only)
        ]

    async def list_upcoming_for_owner(self, owner_id, today):
        return sorted(
            (s for s in self.items.values() if s.ownerId == owner_id and s.isActive and s.endDate >= today),
            key=lambda s: s.startDate,
        )

    async def search(self, start_date=None, end_date=None, department=None, owner_id=None):
        found = []
        for s in self.items.values():
            if start_date and end_date and not date_ranges_overlap(s.startDate, s.endDate, start_date, end_date):
                continue
            if department and s.department != department:
                continue
            if owner_id and s.ownerId != owner_id:
                continue
            found.append(s)
        return sorted(found, key=lambda s: s.startDate)

    async def insert(self, schedule):
        stored = schedule.model_copy(update={"id": str(ObjectId())})
        self.items[stored.id] = stored
        return stored

    async def update(self, schedule_id, changes):
        if schedule_id not in self.items:
            return None
        self.items[schedule_id] = self.items[schedule_id].model_copy(update=changes)
        return self.items[schedule_id]

    async def delete(self, schedule_id):
        return self.items.pop(schedule_id, None) is not None

    async def exchange_owners(self, first, second, updated_by, now):
        stored_first = self.items.get(first.id)
        stored_second = self.items.get(second.id)
        if stored_first is None or stored_first.ownerId != first.ownerId:
            return False
        if stored_second is None or stored_second.ownerId != second.ownerId:
            return False
        self.items[first.id] = stored_first.model_copy(update={"ownerId": second.ownerId, "updatedAt": now})
        self.items[second.id] = stored_second.model_copy(update={"ownerId": first.ownerId, "updatedAt": now})
        return True


class FakeSwapStore:
    def __init__(self):
        self.items = {}

    async def get(self, swap_id):
        return self.items.get(swap_id)

    async def insert(self, swap):
        stored = swap.model_copy(update={"id": str(ObjectId())})
        self.items[stored.id] = stored
        return stored

    async def list_for_user(self, user_id):
        return [s for s in self.items.values() if user_id in (s.requestingUserId, s.targetUserId)]

    async def list_for_department(self, department=None):
        return [s for s in self.items.values() if department is None or s.department == department]

    async def compare_and_set(self, previous, updated):
        stored = self.items.get(previous.id)
        if stored is None or stored.status != previous.status:
            return False
        if (stored.managerApproval is None) != (previous.managerApproval is None):
            return False
        self.items[previous.id] = updated
        return True


class FakeUserStore:
    def __init__(self):
        self.users = {}

    def add(self, user_id, role="employee", department="dept-1", **extra):
        self.users[user_id] = {"_id": user_id, "role": role, "department": department, **extra}
        return Actor.from_user_doc(self.users[user_id])

    async def find_user(self, user_id):
        return self.users.get(user_id)

    async def get_actor(self, user_id):
        user = self.users.get(user_id)
        return Actor.from_user_doc(user) if user else None

    async def list_colleagues(self, department, exclude_user_id):
        return sorted(
            (
                {k: v for k, v in u.items() if k in ("_id", "firstName", "lastName", "email", "position")}
                for u in self.users.values()
                if u.get("department") == department and u["_id"] != exclude_user_id
                and u.get("isActive", True)
            ),
            key=lambda u: u.get("lastName") or "",
        )


def make_schedule(
    schedule_id="s1",
    owner_id="emp-1",
    start_time="09:00",
    end_time="17:00",
    days=("monday", "tuesday", "wednesday", "thursday", "friday"),
    start_date=date(2025, 3, 10),
    end_date=date(2025, 3, 31),
    **extra,
):
    return Schedule(
        _id=schedule_id,
        ownerId=owner_id,
        startDate=start_date,
        endDate=end_date,
        startTime=start_time,
        endTime=end_time,
        days=list(days),
        **extra,
    )


@pytest.fixture
def schedule_store():
    return FakeScheduleStore()


@pytest.fixture
def swap_store():
    return FakeSwapStore()


@pytest.fixture
def user_store():
    store = FakeUserStore()
    store.add("emp-1", firstName="Ana")
    store.add("emp-2", firstName="Ben")
    store.add("emp-3", department="dept-2")
    store.add("mgr-1", role="manager")
    store.add("mgr-2", role="manager", department="dept-2")
    store.add("admin-1", role="admin", department=None)
    return store


@pytest.fixture
def login(user_store):
    """Switch the authenticated user: ``login("mgr-1")``."""
    current = {}

    def _login(user_id):
        current["actor"] = Actor.from_user_doc(user_store.users[user_id])
        return current["actor"]

    app.dependency_overrides[get_current_user] = lambda: current["actor"]
    return _login


@pytest.fixture
def client(schedule_store, swap_store, user_store, login):
    # Keep activity logging away from a real MongoDB
    timesheet.db.db = None
    app.dependency_overrides[get_schedule_store] = lambda: schedule_store
    app.dependency_overrides[get_swap_store] = lambda: swap_store
    app.dependency_overrides[get_user_store] = lambda: user_store
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
