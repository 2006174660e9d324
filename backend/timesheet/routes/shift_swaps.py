from fastapi import APIRouter, HTTPException, Depends, Query
from typing import List, Literal
from timesheet.models.schedule import Schedule
from timesheet.models.shift_swap import SwapRequest, SwapStatus
from timesheet.models.user import Actor, Role
from timesheet.schemas.shift_swap import Colleague, ShiftSwapCreate, ShiftSwapRespond, ManagerDecision
from timesheet.services.schedule_store import ScheduleStore, get_schedule_store
from timesheet.services.swap_store import SwapStore, get_swap_store
from timesheet.services.swap_workflow import (
    APPROVAL_VIEWS,
    InvalidStateTransition,
    UnauthorizedTransition,
    cancel_swap,
    open_swap_request,
    record_manager_approval,
    respond_to_swap,
)
from timesheet.services.user_store import UserStore, get_user_store
from timesheet.utils.auth import get_current_user, require_manager_or_admin
from timesheet.utils.clock import Clock, get_clock
from timesheet.utils.logger import log_event, log_warning, EventTypes

router = APIRouter()

def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, UnauthorizedTransition):
        return HTTPException(403, str(exc))
    if isinstance(exc, InvalidStateTransition):
        return HTTPException(409, str(exc))
    return HTTPException(400, str(exc))

async def _load_swap(swaps: SwapStore, swap_id: str) -> SwapRequest:
    swap = await swaps.get(swap_id)
    if not swap:
        raise HTTPException(404, "Shift swap request not found")
    return swap

async def _save_transition(swaps: SwapStore, previous: SwapRequest, updated: SwapRequest, user_id: str):
    if not await swaps.compare_and_set(previous, updated):
        log_warning(f"Concurrent update rejected for swap {previous.id}", user_id=user_id)
        raise HTTPException(409, "This request was modified by someone else, reload and try again")

@router.post("/request", response_model=SwapRequest, status_code=201)
async def request_shift_swap(
    payload: ShiftSwapCreate,
    current_user: Actor = Depends(get_current_user),
    swaps: SwapStore = Depends(get_swap_store),
    schedules: ScheduleStore = Depends(get_schedule_store),
    users: UserStore = Depends(get_user_store),
    clock: Clock = Depends(get_clock),
):
    """Employee proposes exchanging one of their schedules with a colleague's"""
    requesting_schedule = await schedules.get(payload.requestingScheduleId)
    target_schedule = await schedules.get(payload.targetScheduleId)
    target_user = await users.get_actor(payload.targetUserId)

    if not requesting_schedule or not target_schedule or not target_user:
        raise HTTPException(404, "Schedule or user not found")

    try:
        swap = open_swap_request(
            current_user, target_user, requesting_schedule, target_schedule, payload.reason, clock()
        )
    except (InvalidStateTransition, ValueError) as exc:
        raise _http_error(exc)

    created = await swaps.insert(swap)
    await log_event(EventTypes.SHIFT_SWAP_REQUESTED, {
        "swap_request_id": created.id,
        "target_user_id": created.targetUserId,
        "requesting_schedule_id": created.requestingScheduleId,
        "target_schedule_id": created.targetScheduleId,
    }, user_id=current_user.id)
    return created

@router.get("/", response_model=List[SwapRequest])
async def list_my_swaps(
    current_user: Actor = Depends(get_current_user),
    swaps: SwapStore = Depends(get_swap_store),
):
    """Swaps where the current user is either the requester or the target"""
    return await swaps.list_for_user(current_user.id)

@router.get("/approvals", response_model=List[SwapRequest])
async def list_for_manager_approval(
    view: Literal["pending", "approved", "rejected"] = Query("pending"),
    current_user: Actor = Depends(require_manager_or_admin),
    swaps: SwapStore = Depends(get_swap_store),
):
    """Manager dimension only: pending = target approved, no manager decision yet"""
    if current_user.role == Role.ADMIN:
        candidates = await swaps.list_for_department(None)
    elif current_user.department:
        candidates = await swaps.list_for_department(current_user.department)
    else:
        raise HTTPException(403, "No department assigned")
    return APPROVAL_VIEWS[view](candidates)

@router.get("/department/{department}", response_model=List[SwapRequest])
async def list_department_swaps(
    department: str,
    current_user: Actor = Depends(require_manager_or_admin),
    swaps: SwapStore = Depends(get_swap_store),
):
    return await swaps.list_for_department(department)

@router.get("/department-users", response_model=List[Colleague])
async def list_department_users(
    current_user: Actor = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    """Colleagues in the caller's department, the people they can swap with"""
    if not current_user.department:
        raise HTTPException(400, "User department information is missing")
    return await users.list_colleagues(current_user.department, exclude_user_id=current_user.id)

@router.get("/user-schedules/{user_id}", response_model=List[Schedule])
async def list_user_schedules_for_swap(
    user_id: str,
    current_user: Actor = Depends(get_current_user),
    schedules: ScheduleStore = Depends(get_schedule_store),
    users: UserStore = Depends(get_user_store),
    clock: Clock = Depends(get_clock),
):
    """Current and future schedules of a colleague, to pick a swap target from"""
    target_user = await users.get_actor(user_id)
    if not target_user:
        raise HTTPException(404, "User not found")

    same_department = current_user.department is not None and current_user.department == target_user.department
    if not same_department and not current_user.is_manager_or_admin:
        raise HTTPException(403, "You can only view schedules of users in your department")

    return await schedules.list_upcoming_for_owner(user_id, clock().date())

@router.put("/{swap_id}/respond", response_model=SwapRequest)
async def respond_to_swap_request(
    swap_id: str,
    response: ShiftSwapRespond,
    current_user: Actor = Depends(get_current_user),
    swaps: SwapStore = Depends(get_swap_store),
    schedules: ScheduleStore = Depends(get_schedule_store),
    clock: Clock = Depends(get_clock),
):
    swap = await _load_swap(swaps, swap_id)

    requesting_schedule = target_schedule = None
    if response.status == SwapStatus.APPROVED.value:
        requesting_schedule = await schedules.get(swap.requestingScheduleId)
        target_schedule = await schedules.get(swap.targetScheduleId)

    try:
        updated = respond_to_swap(
            swap,
            current_user,
            SwapStatus(response.status),
            clock(),
            notes=response.notes,
            requesting_schedule=requesting_schedule,
            target_schedule=target_schedule,
        )
    except (InvalidStateTransition, ValueError) as exc:
        raise _http_error(exc)

    await _save_transition(swaps, swap, updated, current_user.id)
    await log_event(EventTypes.SHIFT_SWAP_RESPONDED, {
        "swap_request_id": swap_id,
        "status": updated.status.value,
    }, user_id=current_user.id)
    return updated

@router.put("/{swap_id}/manager-approval", response_model=SwapRequest)
async def manager_approval(
    swap_id: str,
    decision: ManagerDecision,
    current_user: Actor = Depends(get_current_user),
    swaps: SwapStore = Depends(get_swap_store),
    schedules: ScheduleStore = Depends(get_schedule_store),
    clock: Clock = Depends(get_clock),
):
    swap = await _load_swap(swaps, swap_id)
    requesting_schedule = await schedules.get(swap.requestingScheduleId)
    target_schedule = await schedules.get(swap.targetScheduleId)
    now = clock()

    try:
        updated = record_manager_approval(
            swap,
            current_user,
            decision.approved,
            now,
            notes=decision.notes,
            requesting_schedule=requesting_schedule,
            target_schedule=target_schedule,
        )
    except (InvalidStateTransition, ValueError) as exc:
        raise _http_error(exc)

    await _save_transition(swaps, swap, updated, current_user.id)

    if decision.approved:
        enacted = await schedules.exchange_owners(requesting_schedule, target_schedule, current_user.id, now)
        if not enacted:
            # Withdraw the recorded decision so the swap can be decided again
            await swaps.compare_and_set(updated, swap)
            log_warning(f"Swap {swap_id} not enacted, a schedule changed owner", user_id=current_user.id)
            raise HTTPException(409, "One of the schedules changed owner, the swap was not applied")

    await log_event(EventTypes.SHIFT_SWAP_MANAGER_DECISION, {
        "swap_request_id": swap_id,
        "approved": decision.approved,
    }, user_id=current_user.id)

    if decision.approved:
        await log_event(EventTypes.SHIFT_SWAP_ENACTED, {
            "swap_request_id": swap_id,
            "schedule_ids": [requesting_schedule.id, target_schedule.id],
        }, user_id=current_user.id)

    return updated

@router.put("/{swap_id}/cancel", response_model=SwapRequest)
async def cancel_swap_request(
    swap_id: str,
    current_user: Actor = Depends(get_current_user),
    swaps: SwapStore = Depends(get_swap_store),
    clock: Clock = Depends(get_clock),
):
    swap = await _load_swap(swaps, swap_id)

    try:
        updated = cancel_swap(swap, current_user, clock())
    except InvalidStateTransition as exc:
        raise _http_error(exc)

    await _save_transition(swaps, swap, updated, current_user.id)
    await log_event(EventTypes.SHIFT_SWAP_CANCELLED, {"swap_request_id": swap_id}, user_id=current_user.id)
    return updated
