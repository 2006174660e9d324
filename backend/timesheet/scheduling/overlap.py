"""
Interval overlap primitives shared by conflict detection and suggestions.

All ranges are half-open: touching endpoints do not overlap.
"""
from datetime import date, datetime, time
from typing import Iterable


def parse_time(value: str) -> int:
    """Parse an ``HH:mm`` string into minutes after midnight.

    Raises ValueError for anything that is not a valid time of day.
    """
    parsed = datetime.strptime(value, "%H:%M")
    return parsed.hour * 60 + parsed.minute


def duration_hours(start_time: str, end_time: str) -> float:
    """Hours between two times of the same day (negative if end precedes start)."""
    return (parse_time(end_time) - parse_time(start_time)) / 60


def is_same_day_window(start_time: str, end_time: str) -> bool:
    return parse_time(end_time) > parse_time(start_time)


def time_ranges_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    return parse_time(start_a) < parse_time(end_b) and parse_time(end_a) > parse_time(start_b)


def date_ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    # Each date range spans from the start of its first day to the end of its last
    range_a = (datetime.combine(start_a, time.min), datetime.combine(end_a, time.max))
    range_b = (datetime.combine(start_b, time.min), datetime.combine(end_b, time.max))
    return range_a[0] < range_b[1] and range_a[1] > range_b[0]


def day_names(days: Iterable[str]) -> set:
    """Normalize Weekday members and plain strings to lowercase day names."""
    return {getattr(day, "value", day).lower() for day in days}


def weekday_sets_overlap(days_a: Iterable[str], days_b: Iterable[str]) -> bool:
    return not day_names(days_a).isdisjoint(day_names(days_b))
