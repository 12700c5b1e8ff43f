# subscription_schema.py
from pydantic import Field
from typing import Optional, List
from datetime import datetime

from schemas.base_schema import CamelModel


# ---------------------------
# Plan catalog
# ---------------------------
class PlanRead(CamelModel):
    id: int
    name: str
    description: str
    price: float
    billing_cycle: str
    max_users: int
    max_receipts_per_month: int
    max_storage_mb: int
    features: List[str] = Field(default_factory=list)
    is_active: bool


class PlanList(CamelModel):
    plans: List[PlanRead]


# ---------------------------
# Billing history
# ---------------------------
class BillingEntryRead(CamelModel):
    id: int
    organization_id: int
    plan_id: int
    plan_name: str
    amount: float
    billing_cycle: str
    status: str
    billing_date: datetime
    next_billing_date: datetime
    description: str
    created_at: datetime


class PlanChangeRequest(CamelModel):
    plan_id: Optional[int] = None


# ---------------------------
# Usage
# ---------------------------
class UsageLimits(CamelModel):
    max_users: int
    max_receipts: int
    max_storage: int


class MonthlyUsage(CamelModel):
    month: str
    receipts: int
    amount: float


class UsagePercentage(CamelModel):
    users: int
    receipts: int
    storage: int


class UsageRead(CamelModel):
    staff_count: int
    active_staff_count: int
    receipts_this_month: int
    total_receipts: int
    storage_used: float
    limits: UsageLimits
    monthly_usage: List[MonthlyUsage]
    usage_percentage: UsagePercentage
