# receipt_schema.py
from typing import Optional, List
from datetime import datetime

from schemas.base_schema import CamelModel


class ReceiptRead(CamelModel):
    id: int
    staff_member_id: int
    organization_id: int
    image_path: str
    merchant_name: Optional[str] = None
    amount: Optional[float] = None
    receipt_date: Optional[datetime] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    status: str
    email_sent_at: Optional[datetime] = None
    created_at: datetime

    # Submitting staff member
    user_name: str = "Unknown User"
    user_email: str = ""


class ReceiptUpdate(CamelModel):
    status: Optional[str] = None
    notes: Optional[str] = None


class PaginationRead(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ReceiptStats(CamelModel):
    total: int
    pending: int
    processed: int
    sent: int


class ReceiptPage(CamelModel):
    receipts: List[ReceiptRead]
    pagination: PaginationRead
    stats: ReceiptStats
