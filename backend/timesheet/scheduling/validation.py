"""
Schedule validation.

``validate_schedule`` is advisory: it returns every problem it finds and
leaves the decision to block or warn to the caller. The weekly hour
ceiling is a warning and is therefore kept out of the issue list.
"""
from datetime import timedelta
from typing import Annotated, Iterable, List, Literal, Union

from pydantic import BaseModel, Field

from timesheet.models.schedule import Schedule, WEEKDAYS
from timesheet.scheduling.conflicts import Conflict, find_conflicts
from timesheet.scheduling.overlap import day_names, duration_hours, parse_time

DEFAULT_MAX_WEEKLY_HOURS = 40


class FieldError(BaseModel):
    kind: Literal["field"] = "field"
    field: Literal["endDate", "endTime", "days"]
    message: str


class ConflictError(BaseModel):
    kind: Literal["conflict"] = "conflict"
    field: Literal["time"] = "time"
    message: str = "Schedule conflicts detected"
    conflicts: List[Conflict]


ValidationIssue = Annotated[Union[FieldError, ConflictError], Field(discriminator="kind")]


def validate_schedule(candidate: Schedule, existing_schedules: Iterable[Schedule]) -> List[ValidationIssue]:
    errors: List[ValidationIssue] = []

    if candidate.endDate < candidate.startDate:
        errors.append(FieldError(field="endDate", message="End date must be after start date"))

    if parse_time(candidate.endTime) <= parse_time(candidate.startTime):
        errors.append(FieldError(field="endTime", message="End time must be after start time"))

    if not candidate.days:
        errors.append(FieldError(field="days", message="At least one working day must be selected"))

    conflicts = find_conflicts(candidate, existing_schedules)
    if conflicts:
        errors.append(ConflictError(conflicts=conflicts))

    return errors


def hours_per_day(schedule: Schedule) -> float:
    return duration_hours(schedule.startTime, schedule.endTime)


def weekly_hours(schedule: Schedule) -> float:
    """Hours for one representative week: daily hours times selected weekdays."""
    return hours_per_day(schedule) * len(day_names(schedule.days))


def exceeds_weekly_hour_limit(schedule: Schedule, limit: float = DEFAULT_MAX_WEEKLY_HOURS) -> bool:
    return weekly_hours(schedule) > limit


def total_working_hours(schedule: Schedule) -> float:
    """Hours actually worked over the whole [startDate, endDate] range."""
    selected = day_names(schedule.days)
    total_days = (schedule.endDate - schedule.startDate).days + 1
    working_days = 0
    for offset in range(max(total_days, 0)):
        day = schedule.startDate + timedelta(days=offset)
        if WEEKDAYS[day.weekday()].value in selected:
            working_days += 1
    return hours_per_day(schedule) * working_days
