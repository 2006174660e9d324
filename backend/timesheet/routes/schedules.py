from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.encoders import jsonable_encoder
from typing import Optional, List
from datetime import date
from timesheet.models.schedule import Schedule
from timesheet.models.user import Actor
from timesheet.schemas.schedule import ScheduleCreate, ScheduleUpdate, ScheduleCheck, ValidationReport
from timesheet.scheduling.suggestions import suggest_alternatives
from timesheet.scheduling.validation import (
    ConflictError,
    exceeds_weekly_hour_limit,
    total_working_hours,
    validate_schedule,
    weekly_hours,
)
from timesheet.services.schedule_store import ScheduleStore, get_schedule_store
from timesheet.services.user_store import UserStore, get_user_store
from timesheet.utils.auth import get_current_user, require_manager_or_admin
from timesheet.utils.clock import Clock, get_clock
from timesheet.utils.logger import log_event, EventTypes
import os

router = APIRouter()

def _max_weekly_hours() -> float:
    return float(os.getenv("MAX_WEEKLY_HOURS", "40"))

def _self_scheduling_allowed() -> bool:
    return os.getenv("ALLOW_SELF_SCHEDULING", "0") == "1"

def _ensure_can_view(schedule_owner_id: str, current_user: Actor):
    if not current_user.is_manager_or_admin and schedule_owner_id != current_user.id:
        raise HTTPException(403, "Not authorized to view this schedule")

def _rejection(errors, suggestions) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=jsonable_encoder({
            "message": "Schedule validation failed",
            "errors": errors,
            "suggestions": suggestions,
        }),
    )

async def _check_candidate(candidate: Schedule, schedules: ScheduleStore):
    existing = await schedules.list_for_owner(candidate.ownerId)
    errors = validate_schedule(candidate, existing)
    has_conflicts = any(isinstance(e, ConflictError) for e in errors)
    suggestions = suggest_alternatives(candidate, existing) if has_conflicts else []
    return errors, suggestions

@router.post("/", response_model=Schedule, status_code=201)
async def create_schedule(
    payload: ScheduleCreate,
    current_user: Actor = Depends(get_current_user),
    schedules: ScheduleStore = Depends(get_schedule_store),
    users: UserStore = Depends(get_user_store),
    clock: Clock = Depends(get_clock),
):
    is_self = payload.ownerId == current_user.id
    if not current_user.is_manager_or_admin and not (is_self and _self_scheduling_allowed()):
        raise HTTPException(403, "Insufficient permissions")

    owner = await users.get_actor(payload.ownerId)
    if owner is None:
        raise HTTPException(404, "Employee not found")

    candidate = Schedule(
        **payload.dict(),
        department=owner.department,
        createdBy=current_user.id,
        createdAt=clock(),
    )

    errors, suggestions = await _check_candidate(candidate, schedules)
    if errors:
        await log_event(EventTypes.SCHEDULE_REJECTED, {
            "owner_id": candidate.ownerId,
            "fields": [e.field for e in errors],
        }, user_id=current_user.id)
        raise _rejection(errors, suggestions)

    created = await schedules.insert(candidate)
    await log_event(EventTypes.SCHEDULE_CREATED, {"schedule_id": created.id}, user_id=current_user.id)
    return created

@router.post("/validate", response_model=ValidationReport)
async def validate_candidate(
    payload: ScheduleCheck,
    current_user: Actor = Depends(get_current_user),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    """Advisory check: nothing is saved, the caller decides what to do."""
    candidate = Schedule(**payload.dict(exclude={"id"}), _id=payload.id)
    errors, suggestions = await _check_candidate(candidate, schedules)

    limit = _max_weekly_hours()
    warnings = []
    if exceeds_weekly_hour_limit(candidate, limit):
        warnings.append(
            f"Schedule exceeds the weekly limit of {limit:g} hours ({weekly_hours(candidate):g} hours per week)"
        )

    return ValidationReport(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        totalHours=total_working_hours(candidate),
        weeklyHours=weekly_hours(candidate),
        suggestions=suggestions,
    )

@router.get("/", response_model=List[Schedule])
async def list_schedules(
    startDate: Optional[date] = Query(None),
    endDate: Optional[date] = Query(None),
    department: Optional[str] = Query(None),
    current_user: Actor = Depends(require_manager_or_admin),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    return await schedules.search(start_date=startDate, end_date=endDate, department=department)

@router.get("/my-schedule", response_model=List[Schedule])
async def my_schedule(
    startDate: Optional[date] = Query(None),
    endDate: Optional[date] = Query(None),
    current_user: Actor = Depends(get_current_user),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    return await schedules.search(start_date=startDate, end_date=endDate, owner_id=current_user.id)

@router.get("/user/{user_id}", response_model=List[Schedule])
async def user_schedules(
    user_id: str,
    startDate: Optional[date] = Query(None),
    endDate: Optional[date] = Query(None),
    current_user: Actor = Depends(get_current_user),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    _ensure_can_view(user_id, current_user)
    return await schedules.search(start_date=startDate, end_date=endDate, owner_id=user_id)

@router.get("/{schedule_id}", response_model=Schedule)
async def get_schedule(
    schedule_id: str,
    current_user: Actor = Depends(get_current_user),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    schedule = await schedules.get(schedule_id)
    if not schedule:
        raise HTTPException(404, "Schedule not found")
    _ensure_can_view(schedule.ownerId, current_user)
    return schedule

@router.put("/{schedule_id}", response_model=Schedule)
async def update_schedule(
    schedule_id: str,
    schedule_update: ScheduleUpdate,
    current_user: Actor = Depends(require_manager_or_admin),
    schedules: ScheduleStore = Depends(get_schedule_store),
    clock: Clock = Depends(get_clock),
):
    existing = await schedules.get(schedule_id)
    if not existing:
        raise HTTPException(404, "Schedule not found")

    changes = schedule_update.dict(exclude_unset=True, exclude_none=True)
    candidate = existing.model_copy(update=changes)

    errors, suggestions = await _check_candidate(candidate, schedules)
    if errors:
        raise _rejection(errors, suggestions)

    changes["updatedAt"] = clock()
    updated = await schedules.update(schedule_id, changes)
    await log_event(EventTypes.SCHEDULE_UPDATED, {"schedule_id": schedule_id}, user_id=current_user.id)
    return updated

@router.delete("/{schedule_id}", status_code=204)
async def delete_schedule(
    schedule_id: str,
    current_user: Actor = Depends(require_manager_or_admin),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    if not await schedules.delete(schedule_id):
        raise HTTPException(404, "Schedule not found")
    await log_event(EventTypes.SCHEDULE_DELETED, {"schedule_id": schedule_id}, user_id=current_user.id)
