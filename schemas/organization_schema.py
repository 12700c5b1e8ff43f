# organization_schema.py
from pydantic import Field
from typing import List, Optional
from datetime import datetime

from schemas.base_schema import CamelModel
from schemas.subscription_schema import PlanRead


class OrganizationRead(CamelModel):
    id: int
    name: str
    domain: Optional[str] = None
    destination_email: str
    subscription_plan_id: Optional[int] = None
    subscription_status: str
    subscription_start_date: Optional[datetime] = None
    subscription_end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CompanySettingsUpdate(CamelModel):
    # Presence and format are checked by the handler so errors read like the portal's
    name: Optional[str] = Field(default=None, max_length=100)
    destination_email: Optional[str] = Field(default=None, max_length=255)
    domain: Optional[str] = Field(default=None, max_length=255)


class SettingsUsage(CamelModel):
    staff_count: int
    active_staff_count: int
    receipts_this_month: int
    max_users: int
    max_receipts: int


class CompanySettingsRead(CamelModel):
    company: OrganizationRead
    subscription_plan: Optional[PlanRead] = None
    usage: SettingsUsage


class CompanySettingsUpdated(CamelModel):
    company: OrganizationRead
    message: str


class SubscriptionSummary(CamelModel):
    subscription_status: Optional[str] = None
    subscription_end_date: Optional[datetime] = None


class CompanyStats(CamelModel):
    total: int
    active: int
    trial: int
    inactive: int
    cancelled: int


class CompanyList(CamelModel):
    companies: List[OrganizationRead]
    stats: CompanyStats


class CompanyEnvelope(CamelModel):
    company: OrganizationRead
