from pydantic import BaseModel, Field, field_validator
from datetime import date
from typing import Optional, List
from timesheet.models.schedule import TIME_PATTERN, ScheduleType, Weekday, unique_days
from timesheet.scheduling.suggestions import Suggestion
from timesheet.scheduling.validation import ValidationIssue

class ScheduleCreate(BaseModel):
    ownerId: str
    startDate: date
    endDate: date
    startTime: str = Field(..., pattern=TIME_PATTERN)  # HH:mm format
    endTime: str = Field(..., pattern=TIME_PATTERN)  # HH:mm format
    type: ScheduleType = ScheduleType.REGULAR
    days: List[Weekday] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator("days")
    @classmethod
    def drop_repeated_days(cls, days):
        return unique_days(days)

class ScheduleUpdate(BaseModel):
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    startTime: Optional[str] = Field(None, pattern=TIME_PATTERN)
    endTime: Optional[str] = Field(None, pattern=TIME_PATTERN)
    type: Optional[ScheduleType] = None
    days: Optional[List[Weekday]] = None
    notes: Optional[str] = None
    isActive: Optional[bool] = None

    @field_validator("days")
    @classmethod
    def drop_repeated_days(cls, days):
        return unique_days(days)

class ScheduleCheck(ScheduleCreate):
    """A candidate to validate without saving; ``id`` marks an edit."""
    id: Optional[str] = None

class ValidationReport(BaseModel):
    valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    totalHours: float
    weeklyHours: float
    suggestions: List[Suggestion] = Field(default_factory=list)
