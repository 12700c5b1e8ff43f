# routes/organization.py
from fastapi import APIRouter, Depends
import logging

from core.errors import NotFoundError, ValidationFailedError
from core.store import RecordStore, get_store
from core.security import get_current_representative
from core.validators import is_valid_email, normalize_email
from models.models import Account, Organization, utcnow
from schemas.organization_schema import (
    CompanySettingsRead, CompanySettingsUpdate, CompanySettingsUpdated,
    OrganizationRead, SettingsUsage,
)
from schemas.subscription_schema import PlanRead
from services.subscription import current_plan, usage_report

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Company"])


def _load_own_organization(store: RecordStore, current_account: Account) -> Organization:
    organization = store.get(Organization, current_account.organization_id)
    if not organization:
        raise NotFoundError("Company not found")
    return organization


# ==================================================================
#  ✅ GET MY COMPANY SETTINGS
# ==================================================================
@router.get("/settings", response_model=CompanySettingsRead)
def get_company_settings(
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    """Company profile, plan and a usage summary"""
    organization = _load_own_organization(store, current_account)
    plan = current_plan(store, organization)
    usage = usage_report(store, organization)

    return CompanySettingsRead(
        company=OrganizationRead.model_validate(organization),
        subscription_plan=PlanRead.model_validate(plan) if plan else None,
        usage=SettingsUsage(
            staff_count=usage["staff_count"],
            active_staff_count=usage["active_staff_count"],
            receipts_this_month=usage["receipts_this_month"],
            max_users=plan.max_users if plan else 0,
            max_receipts=plan.max_receipts_per_month if plan else 0,
        ),
    )


# ==================================================================
#  ✅ UPDATE MY COMPANY SETTINGS
# ==================================================================
@router.put("/settings", response_model=CompanySettingsUpdated)
def update_company_settings(
    payload: CompanySettingsUpdate,
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    organization = _load_own_organization(store, current_account)
    changes = payload.model_dump(exclude_unset=True)

    destination_email = payload.destination_email
    if not destination_email or not is_valid_email(destination_email):
        raise ValidationFailedError("Valid destination email is required")

    name = (payload.name or "").strip()
    if len(name) < 2:
        raise ValidationFailedError("Company name must be at least 2 characters")

    fields = {
        "name": name,
        "destination_email": normalize_email(destination_email),
        "updated_at": utcnow(),
    }
    if "domain" in changes:
        # A blank domain clears it
        fields["domain"] = (changes["domain"] or "").strip() or None

    organization = store.update(Organization, organization.id, fields)
    logger.info("Company settings updated for organization %s", organization.id)

    return CompanySettingsUpdated(
        company=OrganizationRead.model_validate(organization),
        message="Company settings updated successfully",
    )
