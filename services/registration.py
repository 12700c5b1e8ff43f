# ================================================================
# services/registration.py: Company sign-up workflow
# ================================================================
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
import logging

from core.config import settings
from core.errors import ConflictError, InvalidPlanError, ValidationFailedError
from core.security import hash_password, issue_session_token
from core.store import RecordStore
from core.validators import MIN_PASSWORD_LENGTH, is_blank, is_valid_email, normalize_email
from models.models import (
    Account, AccountRole, BillingEntry, BillingStatus, EmailOwner,
    Organization, Plan, SubscriptionStatus, as_utc, utcnow,
)
from schemas.registration_schema import RegistrationRequest

logger = logging.getLogger(__name__)

STEP_COMPANY = 1
STEP_REPRESENTATIVE = 2
STEP_PLAN = 3
LAST_STEP = STEP_PLAN


class RegistrationState(str, Enum):
    DRAFT = "draft"
    VALIDATED = "validated"
    COMMITTED = "committed"


@dataclass
class RegistrationResult:
    organization: Organization
    account: Account
    billing_entry: BillingEntry
    plan: Plan
    token: str


# ----------------------------------------------------------------------
# Step validation
# ----------------------------------------------------------------------
def validate_step(step: int, form: RegistrationRequest) -> None:
    """Check one form step and raise on the first problem found."""
    if step == STEP_COMPANY:
        if is_blank(form.company_name):
            raise ValidationFailedError("Company name is required")
        if is_blank(form.destination_email):
            raise ValidationFailedError("Destination email is required")
        if not is_valid_email(form.destination_email):
            raise ValidationFailedError("Please enter a valid destination email")

    elif step == STEP_REPRESENTATIVE:
        if is_blank(form.representative_name):
            raise ValidationFailedError("Representative name is required")
        if is_blank(form.representative_email):
            raise ValidationFailedError("Representative email is required")
        if not is_valid_email(form.representative_email):
            raise ValidationFailedError("Please enter a valid representative email")
        if not form.representative_password:
            raise ValidationFailedError("Password is required")
        if len(form.representative_password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailedError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        # Confirmation is optional for API clients; when sent it must match
        if form.confirm_password is not None and form.representative_password != form.confirm_password:
            raise ValidationFailedError("Passwords do not match")

    elif step == STEP_PLAN:
        if form.selected_plan_id is None:
            raise ValidationFailedError("Please select a subscription plan")

    else:
        raise ValueError(f"Unknown registration step: {step}")


class RegistrationWorkflow:
    """
    Multi-step sign-up form.

    The form stays in ``draft`` while steps are filled in; ``advance`` only
    moves forward when the current step validates, keeping a single error
    message otherwise. Once the last step passes the workflow is
    ``validated`` and ``commit`` persists it.
    """

    def __init__(self, form: Optional[RegistrationRequest] = None):
        self.form = form or RegistrationRequest()
        self.current_step = STEP_COMPANY
        self.state = RegistrationState.DRAFT
        self.error: Optional[str] = None

    def update(self, **fields) -> None:
        self.form = self.form.model_copy(update=fields)
        if self.state == RegistrationState.VALIDATED:
            self.state = RegistrationState.DRAFT

    def advance(self) -> bool:
        try:
            validate_step(self.current_step, self.form)
        except ValidationFailedError as e:
            self.error = e.message
            return False

        self.error = None
        if self.current_step < LAST_STEP:
            self.current_step += 1
        else:
            self.state = RegistrationState.VALIDATED
        return True

    def back(self) -> None:
        self.error = None
        if self.current_step > STEP_COMPANY:
            self.current_step -= 1
        self.state = RegistrationState.DRAFT

    def commit(self, store: RecordStore) -> RegistrationResult:
        if self.state != RegistrationState.VALIDATED:
            raise ValidationFailedError("Registration form has not been validated")
        result = register_organization(store, self.form)
        self.state = RegistrationState.COMMITTED
        return result


# ----------------------------------------------------------------------
# Commit
# ----------------------------------------------------------------------
def register_organization(
    store: RecordStore,
    form: RegistrationRequest,
    now: Optional[datetime] = None,
) -> RegistrationResult:
    """
    Create the organization, its representative and the trial billing entry
    in one transaction, then issue the representative's session token.
    """
    required = (
        form.company_name, form.destination_email, form.representative_name,
        form.representative_email, form.representative_password,
    )
    if any(is_blank(value) for value in required) or form.selected_plan_id is None:
        raise ValidationFailedError("All required fields must be provided")

    for step in (STEP_COMPANY, STEP_REPRESENTATIVE, STEP_PLAN):
        validate_step(step, form)

    email = normalize_email(form.representative_email)
    if store.email_in_use(email):
        raise ConflictError("A user with this email already exists")

    plan = store.get(Plan, form.selected_plan_id)
    if not plan or not plan.is_active:
        raise InvalidPlanError("Invalid subscription plan selected")

    now = as_utc(now) if now else utcnow()
    trial_end = now + timedelta(days=settings.TRIAL_DAYS)

    try:
        with store.atomic():
            store.claim_email(email, EmailOwner.ACCOUNT.value)

            organization = store.create(Organization, Organization(
                name=form.company_name.strip(),
                domain=(form.company_domain or "").strip() or None,
                destination_email=normalize_email(form.destination_email),
                subscription_plan_id=plan.id,
                subscription_status=SubscriptionStatus.TRIAL.value,
                subscription_start_date=now,
                subscription_end_date=trial_end,
                created_at=now,
            ))

            account = store.create(Account, Account(
                email=email,
                password_hash=hash_password(form.representative_password),
                name=form.representative_name.strip(),
                role=AccountRole.COMPANY_REPRESENTATIVE.value,
                organization_id=organization.id,
                is_active=True,
                created_at=now,
            ))

            billing_entry = store.create(BillingEntry, BillingEntry(
                organization_id=organization.id,
                plan_id=plan.id,
                plan_name=plan.name,
                amount=0.0,
                billing_cycle=plan.billing_cycle,
                status=BillingStatus.PAID.value,
                billing_date=now,
                next_billing_date=trial_end,
                description=f"{settings.TRIAL_DAYS}-day trial for {plan.name} plan",
                created_at=now,
            ))
    except ConflictError:
        raise ConflictError("A user with this email already exists")

    token = issue_session_token(account)
    logger.info("Registered organization %s with representative account %s", organization.id, account.id)

    return RegistrationResult(
        organization=organization,
        account=account,
        billing_entry=billing_entry,
        plan=plan,
        token=token,
    )
