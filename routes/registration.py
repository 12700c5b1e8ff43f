from fastapi import APIRouter, Depends

from core.store import RecordStore, get_store
from schemas.registration_schema import (
    RegisteredCompany, RegisteredUser, RegistrationRequest,
    RegistrationResponse, TrialPlan,
)
from services.registration import register_organization

router = APIRouter(tags=["Registration"])


# ==========================================================
# ✅ Public Registration: creates organization + representative
# ==========================================================
@router.post("/register", response_model=RegistrationResponse)
def register(payload: RegistrationRequest, store: RecordStore = Depends(get_store)):
    """Creates a new organization on a trial plan and its representative account"""
    result = register_organization(store, payload)

    return RegistrationResponse(
        user=RegisteredUser.model_validate(result.account),
        company=RegisteredCompany.model_validate(result.organization),
        token=result.token,
        subscription_plan=TrialPlan(
            name=result.plan.name,
            trial_end_date=result.organization.subscription_end_date,
        ),
    )
