# ================================================================
# services/subscription.py: Plan catalog, plan changes, usage
# ================================================================
import calendar
import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from core.errors import InvalidPlanError
from core.store import RecordStore
from models.models import (
    BillingCycle, BillingEntry, BillingStatus, DEFAULT_PLAN_CATALOG,
    Organization, Plan, Receipt, StaffMember, SubscriptionStatus, as_utc, utcnow,
)

logger = logging.getLogger(__name__)

# Fallback limits for an organization without a plan
DEFAULT_LIMITS = {"max_users": 5, "max_receipts": 100, "max_storage": 1000}
STORAGE_MB_PER_RECEIPT = 0.5
USAGE_HISTORY_MONTHS = 6


def add_months(dt: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def subscription_end_date(plan: Plan, start: datetime) -> datetime:
    if plan.billing_cycle == BillingCycle.ANNUAL.value:
        return add_months(start, 12)
    return add_months(start, 1)


# ------------------------------------------------------------
# Catalog
# ------------------------------------------------------------
def seed_plan_catalog(store: RecordStore, catalog: Optional[List[Dict]] = None) -> List[Plan]:
    """Insert the default plans when the catalog is empty."""
    existing = store.list(Plan, order_by=Plan.id)
    if existing:
        return existing

    with store.atomic():
        for entry in catalog or DEFAULT_PLAN_CATALOG:
            fields = dict(entry)
            features = fields.pop("features", [])
            store.create(Plan, Plan(features_json=json.dumps(features), **fields))

    plans = store.list(Plan, order_by=Plan.id)
    logger.info("Seeded %d subscription plans", len(plans))
    return plans


def active_plans(store: RecordStore) -> List[Plan]:
    return store.list(Plan, Plan.is_active == True, order_by=Plan.id)  # noqa: E712


def current_plan(store: RecordStore, organization: Organization) -> Optional[Plan]:
    return store.get(Plan, organization.subscription_plan_id)


def deactivate_plan(store: RecordStore, plan_id: int) -> Optional[Plan]:
    # Plans stay in the table so billing history keeps resolving
    return store.update(Plan, plan_id, {"is_active": False})


# ------------------------------------------------------------
# Plan change
# ------------------------------------------------------------
@dataclass
class PlanChange:
    organization: Organization
    plan: Plan
    billing_entry: BillingEntry


def change_plan(
    store: RecordStore,
    organization: Organization,
    plan_id: Optional[int],
    now: Optional[datetime] = None,
) -> PlanChange:
    """
    Move an organization onto a plan and record the billing entry.
    No payment is taken; the entry records intent only.
    """
    plan = store.get(Plan, plan_id)
    if not plan or not plan.is_active:
        raise InvalidPlanError("Invalid subscription plan")

    now = as_utc(now) if now else utcnow()
    end_date = subscription_end_date(plan, now)

    with store.atomic():
        organization = store.update(Organization, organization.id, {
            "subscription_plan_id": plan.id,
            "subscription_status": SubscriptionStatus.ACTIVE.value,
            "subscription_end_date": end_date,
            "updated_at": now,
        })
        billing_entry = store.create(BillingEntry, BillingEntry(
            organization_id=organization.id,
            plan_id=plan.id,
            plan_name=plan.name,
            amount=plan.price,
            billing_cycle=plan.billing_cycle,
            status=BillingStatus.PAID.value,
            billing_date=now,
            next_billing_date=end_date,
            description=f"Subscription to {plan.name} plan",
            created_at=now,
        ))

    logger.info("Organization %s moved to plan %s", organization.id, plan.name)
    return PlanChange(organization=organization, plan=plan, billing_entry=billing_entry)


def billing_history(store: RecordStore, organization_id: int) -> List[BillingEntry]:
    entries = store.list(BillingEntry, BillingEntry.organization_id == organization_id)
    return sorted(entries, key=lambda e: (e.created_at, e.id), reverse=True)


# ------------------------------------------------------------
# Usage
# ------------------------------------------------------------
def plan_limits(plan: Optional[Plan]) -> Dict[str, int]:
    if plan is None:
        return dict(DEFAULT_LIMITS)
    return {
        "max_users": plan.max_users or DEFAULT_LIMITS["max_users"],
        "max_receipts": plan.max_receipts_per_month or DEFAULT_LIMITS["max_receipts"],
        "max_storage": plan.max_storage_mb or DEFAULT_LIMITS["max_storage"],
    }


def percent_of(used: float, limit: int) -> int:
    """Whole percent of `limit`, halves rounded up (10 of 2000 is 1, not 0)."""
    if limit <= 0:
        return 0
    return int(math.floor(used / limit * 100 + 0.5))


def _same_month(dt: datetime, year: int, month: int) -> bool:
    return dt.year == year and dt.month == month


def usage_report(store: RecordStore, organization: Organization, now: Optional[datetime] = None) -> Dict:
    now = as_utc(now) if now else utcnow()
    staff = store.list(StaffMember, StaffMember.organization_id == organization.id)
    receipts = store.list(Receipt, Receipt.organization_id == organization.id)
    limits = plan_limits(current_plan(store, organization))

    this_month = [r for r in receipts if _same_month(r.created_at, now.year, now.month)]
    storage_used = len(receipts) * STORAGE_MB_PER_RECEIPT

    monthly_usage = []
    for offset in range(USAGE_HISTORY_MONTHS - 1, -1, -1):
        month_start = add_months(now.replace(day=1), -offset)
        in_month = [r for r in receipts if _same_month(r.created_at, month_start.year, month_start.month)]
        monthly_usage.append({
            "month": month_start.strftime("%b %Y"),
            "receipts": len(in_month),
            "amount": round(sum(r.amount or 0 for r in in_month), 2),
        })

    return {
        "staff_count": len(staff),
        "active_staff_count": sum(1 for s in staff if s.is_active),
        "receipts_this_month": len(this_month),
        "total_receipts": len(receipts),
        "storage_used": storage_used,
        "limits": limits,
        "monthly_usage": monthly_usage,
        "usage_percentage": {
            "users": percent_of(len(staff), limits["max_users"]),
            "receipts": percent_of(len(this_month), limits["max_receipts"]),
            "storage": percent_of(storage_used, limits["max_storage"]),
        },
    }
