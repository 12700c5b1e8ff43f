# staff_schema.py
from typing import Optional, List
from datetime import datetime

from schemas.base_schema import CamelModel


# ---------------------------
# Create / Update
# ---------------------------
class StaffCreate(CamelModel):
    # All four are required; the handler reports missing ones in one message
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    password: Optional[str] = None


class StaffUpdate(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None
    password: Optional[str] = None


# ---------------------------
# Read
# ---------------------------
class StaffRead(CamelModel):
    id: int
    email: str
    name: str
    organization_id: int
    role: str
    is_active: bool
    created_by: Optional[int] = None
    created_at: datetime


class StaffList(CamelModel):
    staff: List[StaffRead]


class StaffEnvelope(CamelModel):
    staff: StaffRead
    message: str
