from pydantic import BaseModel, Field
from typing import Optional, Literal

class ShiftSwapCreate(BaseModel):
    targetUserId: str
    requestingScheduleId: str
    targetScheduleId: str
    reason: str = Field(..., max_length=500)

class ShiftSwapRespond(BaseModel):
    """Target employee's answer to a swap request"""
    status: Literal["approved", "rejected"]
    notes: Optional[str] = Field(None, max_length=1000)

class ManagerDecision(BaseModel):
    approved: bool
    notes: Optional[str] = Field(None, max_length=500)

class Colleague(BaseModel):
    """A same-department user who can be offered a swap."""
    id: str = Field(..., alias="_id")
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    position: Optional[str] = None

    class Config:
        populate_by_name = True
