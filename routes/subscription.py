# routes/subscription.py
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends

from core.errors import NotFoundError, ValidationFailedError
from core.store import RecordStore, get_store
from core.security import get_current_account, get_current_representative
from models.models import Account, Organization
from schemas.base_schema import CamelModel
from schemas.organization_schema import OrganizationRead, SubscriptionSummary
from schemas.subscription_schema import (
    BillingEntryRead, PlanChangeRequest, PlanList, PlanRead, UsageRead,
)
from services.subscription import (
    active_plans, billing_history, change_plan, current_plan, usage_report,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["Subscription"])


# -------------------------
# Request / Response models
# -------------------------
class BillingOverview(CamelModel):
    billing_history: List[BillingEntryRead]
    current_plan: Optional[PlanRead] = None
    company: SubscriptionSummary


class PlanChangeResponse(CamelModel):
    success: bool = True
    message: str
    company: OrganizationRead
    plan: PlanRead
    billing_entry: BillingEntryRead


class UsageOverview(CamelModel):
    usage: UsageRead
    current_plan: Optional[PlanRead] = None
    company: SubscriptionSummary


# -------------------------
# Helper Functions
# -------------------------
def _load_own_organization(store: RecordStore, current_account: Account) -> Organization:
    organization = store.get(Organization, current_account.organization_id)
    if not organization:
        raise NotFoundError("User or company not found")
    return organization


def _plan_read(plan) -> Optional[PlanRead]:
    return PlanRead.model_validate(plan) if plan else None


# -------------------------
# Routes
# -------------------------
@router.get("/plans", response_model=PlanList)
def list_plans(
    current_account: Account = Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    """List the active subscription plans."""
    return PlanList(plans=[PlanRead.model_validate(p) for p in active_plans(store)])


@router.get("/billing", response_model=BillingOverview)
def get_billing(
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    """Billing history (newest first) with the current plan."""
    organization = _load_own_organization(store, current_account)

    return BillingOverview(
        billing_history=[BillingEntryRead.model_validate(e) for e in billing_history(store, organization.id)],
        current_plan=_plan_read(current_plan(store, organization)),
        company=SubscriptionSummary.model_validate(organization),
    )


@router.post("/change", response_model=PlanChangeResponse)
def change_subscription(
    payload: PlanChangeRequest,
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    if payload.plan_id is None:
        raise ValidationFailedError("Plan ID is required")

    organization = _load_own_organization(store, current_account)
    change = change_plan(store, organization, payload.plan_id)

    return PlanChangeResponse(
        message=f"Successfully upgraded to {change.plan.name} plan",
        company=OrganizationRead.model_validate(change.organization),
        plan=PlanRead.model_validate(change.plan),
        billing_entry=BillingEntryRead.model_validate(change.billing_entry),
    )


@router.get("/usage", response_model=UsageOverview)
def get_usage(
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    organization = _load_own_organization(store, current_account)

    return UsageOverview(
        usage=UsageRead.model_validate(usage_report(store, organization)),
        current_plan=_plan_read(current_plan(store, organization)),
        company=SubscriptionSummary.model_validate(organization),
    )
