"""
Shift swap lifecycle.

A swap request moves ``pending -> approved | rejected | cancelled`` on the
target employee's answer (or the requester's cancellation). Once the
target has approved, a manager may record ``managerApproval`` exactly once.
The manager's decision lives beside ``status`` and never rewrites it:
``status`` is the target's answer, ``managerApproval.approved`` is the
manager's.

Every transition is a pure function returning an updated copy. Callers
persist the result with a compare-and-set on the fields the guard read.
"""
from datetime import datetime, time, timedelta
from typing import Iterable, List, Optional

from timesheet.models.schedule import Schedule
from timesheet.models.shift_swap import ManagerApproval, SwapRequest, SwapStatus
from timesheet.models.user import Actor, Role

# Earliest hour on the next day at which a swapped shift may begin
SWAP_NOTICE_HOUR = 8


class InvalidStateTransition(Exception):
    """A lifecycle operation attempted from a state that does not allow it."""


class UnauthorizedTransition(InvalidStateTransition):
    """The acting user may not perform this lifecycle operation."""


def first_shift_start(schedule: Schedule) -> datetime:
    return datetime.combine(schedule.startDate, time.fromisoformat(schedule.startTime.zfill(5)))


def swap_notice_cutoff(now: datetime) -> datetime:
    return datetime.combine(now.date() + timedelta(days=1), time(SWAP_NOTICE_HOUR))


def open_swap_request(
    requester: Actor,
    target: Actor,
    requesting_schedule: Schedule,
    target_schedule: Schedule,
    reason: str,
    now: datetime,
) -> SwapRequest:
    reason = (reason or "").strip()
    if not reason:
        raise ValueError("Reason for swap is required")

    if requester.id == target.id:
        raise ValueError("Cannot swap shifts with yourself")

    if requesting_schedule.ownerId != requester.id:
        raise UnauthorizedTransition("Not authorized to swap this schedule")

    if target_schedule.ownerId != target.id:
        raise UnauthorizedTransition("Target schedule does not belong to target user")

    if requester.department and target.department and requester.department != target.department:
        raise UnauthorizedTransition("Cannot swap shifts with users from different departments")

    return SwapRequest(
        requestingUserId=requester.id,
        targetUserId=target.id,
        requestingScheduleId=str(requesting_schedule.id),
        targetScheduleId=str(target_schedule.id),
        department=requester.department,
        reason=reason,
        status=SwapStatus.PENDING,
        requestDate=now,
        createdAt=now,
    )


def respond_to_swap(
    swap: SwapRequest,
    responder: Actor,
    decision: SwapStatus,
    now: datetime,
    notes: Optional[str] = None,
    requesting_schedule: Optional[Schedule] = None,
    target_schedule: Optional[Schedule] = None,
) -> SwapRequest:
    """Record the target employee's answer.

    Approving needs both schedules so the notice window can be checked;
    rejecting does not.
    """
    decision = SwapStatus(decision)
    if decision not in (SwapStatus.APPROVED, SwapStatus.REJECTED):
        raise ValueError(f"Invalid response status: {decision.value}")

    if responder.id != swap.targetUserId:
        raise UnauthorizedTransition("Not authorized to respond to this request")

    if swap.status != SwapStatus.PENDING:
        raise InvalidStateTransition("This request has already been processed")

    if decision == SwapStatus.APPROVED:
        if requesting_schedule is None or target_schedule is None:
            raise InvalidStateTransition("One or both schedules no longer exist")
        cutoff = swap_notice_cutoff(now)
        if first_shift_start(requesting_schedule) < cutoff or first_shift_start(target_schedule) < cutoff:
            raise InvalidStateTransition(
                "Cannot swap schedules that start before the next working day (8 AM)"
            )

    return swap.model_copy(update={
        "status": decision,
        "responseDate": now,
        "responseNotes": notes,
        "updatedAt": now,
    })


def record_manager_approval(
    swap: SwapRequest,
    manager: Actor,
    approved: bool,
    now: datetime,
    notes: Optional[str] = None,
    requesting_schedule: Optional[Schedule] = None,
    target_schedule: Optional[Schedule] = None,
) -> SwapRequest:
    if not manager.is_manager_or_admin:
        raise UnauthorizedTransition("Not authorized to approve this swap")

    # Only admins act across departments; a manager without one acts nowhere
    if manager.role != Role.ADMIN and (manager.department is None or manager.department != swap.department):
        raise UnauthorizedTransition("Not authorized to approve swaps outside your department")

    if swap.status != SwapStatus.APPROVED:
        raise InvalidStateTransition(
            "This request must be approved by the target employee before manager approval"
        )

    if swap.managerApproval is not None:
        raise InvalidStateTransition("This request has already been processed by a manager")

    for schedule in (requesting_schedule, target_schedule):
        if schedule is None:
            raise InvalidStateTransition("One or both schedules no longer exist")
        if first_shift_start(schedule) <= now:
            raise InvalidStateTransition("Cannot swap past or current schedules")

    return swap.model_copy(update={
        "managerApproval": ManagerApproval(
            approved=approved,
            notes=notes or None,
            approvedBy=manager.id,
            approvalDate=now,
        ),
        "updatedAt": now,
    })


def cancel_swap(swap: SwapRequest, actor: Actor, now: datetime) -> SwapRequest:
    if actor.id != swap.requestingUserId:
        raise UnauthorizedTransition("Only the requesting employee can cancel this request")

    if swap.status != SwapStatus.PENDING:
        raise InvalidStateTransition("Cannot cancel a request that has been processed")

    return swap.model_copy(update={"status": SwapStatus.CANCELLED, "updatedAt": now})


# ---------------------------------------------------------------------------
# Read-only views over the manager dimension
# ---------------------------------------------------------------------------

def awaiting_manager_approval(swaps: Iterable[SwapRequest]) -> List[SwapRequest]:
    return [s for s in swaps if s.status == SwapStatus.APPROVED and s.managerApproval is None]


def manager_approved(swaps: Iterable[SwapRequest]) -> List[SwapRequest]:
    return [s for s in swaps if s.managerApproval is not None and s.managerApproval.approved]


def manager_rejected(swaps: Iterable[SwapRequest]) -> List[SwapRequest]:
    return [s for s in swaps if s.managerApproval is not None and not s.managerApproval.approved]


APPROVAL_VIEWS = {
    "pending": awaiting_manager_approval,
    "approved": manager_approved,
    "rejected": manager_rejected,
}
