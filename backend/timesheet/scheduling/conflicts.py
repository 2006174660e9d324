from typing import Iterable, List, Literal

from pydantic import BaseModel

from timesheet.models.schedule import Schedule
from timesheet.scheduling.overlap import (
    date_ranges_overlap,
    time_ranges_overlap,
    weekday_sets_overlap,
)


class Conflict(BaseModel):
    scheduleId: str
    type: Literal["time_overlap"] = "time_overlap"
    timeRange: str
    message: str


def schedules_conflict(a: Schedule, b: Schedule) -> bool:
    """True when dates, weekdays and daily windows all overlap."""
    if not date_ranges_overlap(a.startDate, a.endDate, b.startDate, b.endDate):
        return False
    if not weekday_sets_overlap(a.days, b.days):
        return False
    return time_ranges_overlap(a.startTime, a.endTime, b.startTime, b.endTime)


def find_conflicts(candidate: Schedule, existing_schedules: Iterable[Schedule]) -> List[Conflict]:
    """Return conflicts in the iteration order of ``existing_schedules``.

    A schedule sharing the candidate's id is skipped so that an edited
    schedule is never reported as conflicting with its stored version.
    """
    conflicts = []
    for existing in existing_schedules:
        if candidate.id is not None and existing.id == candidate.id:
            continue
        if not schedules_conflict(candidate, existing):
            continue
        conflicts.append(Conflict(
            scheduleId=str(existing.id),
            timeRange=existing.time_range,
            message=f"Schedule overlaps with existing schedule ({existing.time_range})",
        ))
    return conflicts
