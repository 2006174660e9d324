import logging
from typing import List, Literal, Sequence

from pydantic import BaseModel

from timesheet.models.schedule import Schedule, WEEKDAYS
from timesheet.scheduling.conflicts import find_conflicts
from timesheet.scheduling.overlap import day_names, is_same_day_window

logger = logging.getLogger(__name__)

# Tried in order. 22:00-06:00 wraps past midnight, which the same-day
# time model cannot express, so it is never offered (see DESIGN.md).
ALTERNATIVE_TIME_SLOTS = (
    ("09:00", "17:00"),
    ("14:00", "22:00"),
    ("22:00", "06:00"),
)


class Suggestion(BaseModel):
    type: Literal["alternative_time", "alternative_days"]
    schedule: Schedule
    message: str


def suggest_alternatives(candidate: Schedule, existing_schedules: Sequence[Schedule]) -> List[Suggestion]:
    """Best-effort conflict-free variants of ``candidate``.

    Only the fixed time slots and the complementary weekdays are tried.
    Returns nothing when the candidate does not conflict at all.
    """
    if not find_conflicts(candidate, existing_schedules):
        return []

    suggestions = []
    for start, end in ALTERNATIVE_TIME_SLOTS:
        if not is_same_day_window(start, end):
            logger.debug("Skipping overnight slot %s-%s", start, end)
            continue
        alternative = candidate.model_copy(update={"startTime": start, "endTime": end})
        if not find_conflicts(alternative, existing_schedules):
            suggestions.append(Suggestion(
                type="alternative_time",
                schedule=alternative,
                message=f"Consider changing time to {start}-{end}",
            ))

    selected = day_names(candidate.days)
    free_days = [day for day in WEEKDAYS if day.value not in selected]
    if free_days:
        alternative = candidate.model_copy(update={"days": free_days[:len(selected)]})
        if not find_conflicts(alternative, existing_schedules):
            suggestions.append(Suggestion(
                type="alternative_days",
                schedule=alternative,
                message=f"Consider changing working days to {', '.join(d.value for d in alternative.days)}",
            ))

    return suggestions
