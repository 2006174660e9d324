from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional, List
from enum import Enum

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"

class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

# Indexed by date.weekday()
WEEKDAYS = list(Weekday)

def unique_days(days):
    """Drop repeated weekdays, keeping first-seen order."""
    if days is None:
        return None
    return list(dict.fromkeys(days))

class ScheduleType(str, Enum):
    REGULAR = "regular"
    OVERTIME = "overtime"
    FLEXIBLE = "flexible"
    REMOTE = "remote"

class Schedule(BaseModel):
    """A recurring work window for one employee across a date range."""
    id: Optional[str] = Field(None, alias="_id")
    ownerId: str
    startDate: date
    endDate: date
    startTime: str = Field(..., pattern=TIME_PATTERN)  # HH:mm format
    endTime: str = Field(..., pattern=TIME_PATTERN)  # HH:mm format
    type: ScheduleType = ScheduleType.REGULAR
    days: List[Weekday] = Field(default_factory=list)
    notes: Optional[str] = None
    department: Optional[str] = None
    createdBy: Optional[str] = None
    isActive: bool = True
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @field_validator("days")
    @classmethod
    def drop_repeated_days(cls, days):
        return unique_days(days)

    class Config:
        populate_by_name = True
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }

    @property
    def time_range(self) -> str:
        return f"{self.startTime}-{self.endTime}"
