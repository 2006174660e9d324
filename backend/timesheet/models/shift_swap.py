from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum

class SwapStatus(str, Enum):
    """The target employee's answer to a swap request."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

class ManagerApproval(BaseModel):
    """Second sign-off, recorded independently of SwapRequest.status."""
    approved: bool
    notes: Optional[str] = Field(None, max_length=500)
    approvedBy: str
    approvalDate: datetime

class SwapRequest(BaseModel):
    id: Optional[str] = Field(None, alias="_id")

    # Parties
    requestingUserId: str
    targetUserId: str
    requestingScheduleId: str
    targetScheduleId: str
    department: Optional[str] = None  # requester's department, scopes manager approval

    reason: str = Field(..., max_length=500)

    # Target employee response
    status: SwapStatus = SwapStatus.PENDING
    requestDate: datetime
    responseDate: Optional[datetime] = None
    responseNotes: Optional[str] = None

    # Only set once status is approved
    managerApproval: Optional[ManagerApproval] = None

    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    class Config:
        populate_by_name = True
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }
