# routes/companies.py
from fastapi import APIRouter, Depends

from core.errors import NotFoundError
from core.store import RecordStore, get_store
from core.security import ensure_organization_access, get_current_account, get_current_master_admin
from models.models import Account, Organization, SubscriptionStatus
from schemas.organization_schema import CompanyEnvelope, CompanyList, CompanyStats, OrganizationRead

router = APIRouter(prefix="/companies", tags=["Companies"])


# ==================================================================
#  ✅ LIST ALL COMPANIES (master admin)
# ==================================================================
@router.get("", response_model=CompanyList)
def list_companies(
    current_account: Account = Depends(get_current_master_admin),
    store: RecordStore = Depends(get_store),
):
    """Every organization, newest first, with counts per subscription status"""
    organizations = store.list(Organization, order_by=Organization.created_at.desc())

    counts = {status.value: 0 for status in SubscriptionStatus}
    for organization in organizations:
        counts[organization.subscription_status] = counts.get(organization.subscription_status, 0) + 1

    return CompanyList(
        companies=[OrganizationRead.model_validate(o) for o in organizations],
        stats=CompanyStats(
            total=len(organizations),
            active=counts[SubscriptionStatus.ACTIVE.value],
            trial=counts[SubscriptionStatus.TRIAL.value],
            inactive=counts[SubscriptionStatus.INACTIVE.value],
            cancelled=counts[SubscriptionStatus.CANCELLED.value],
        ),
    )


# ==================================================================
#  ✅ GET ONE COMPANY
# ==================================================================
@router.get("/{company_id}", response_model=CompanyEnvelope)
def get_company(
    company_id: int,
    current_account: Account = Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    organization = store.get(Organization, company_id)
    if not organization:
        raise NotFoundError("Company not found")
    ensure_organization_access(current_account, organization.id)
    return CompanyEnvelope(company=OrganizationRead.model_validate(organization))
