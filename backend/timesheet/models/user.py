from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

class Role(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"

MANAGEMENT_ROLES = (Role.MANAGER, Role.ADMIN)

class Actor(BaseModel):
    """The authenticated identity performing an operation."""
    id: str = Field(..., alias="_id")
    role: Role = Role.EMPLOYEE
    department: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None

    class Config:
        populate_by_name = True

    @property
    def is_manager_or_admin(self) -> bool:
        return self.role in MANAGEMENT_ROLES

    @classmethod
    def from_user_doc(cls, user: dict) -> "Actor":
        # Older seed data stores the admin role as "administrator"
        role = user.get("role") or Role.EMPLOYEE.value
        if role == "administrator":
            role = Role.ADMIN.value
        department = user.get("department")
        return cls(
            _id=str(user["_id"]),
            role=role,
            department=str(department) if department is not None else None,
            firstName=user.get("firstName"),
            lastName=user.get("lastName"),
        )
