from datetime import datetime, timedelta, timezone

import pytest

from core.errors import ConflictError, InvalidPlanError, ValidationFailedError
from core.security import validate_session_token
from models.models import Account, BillingEntry, Organization, Plan, StaffMember, SubscriptionStatus
from schemas.registration_schema import RegistrationRequest
from services.registration import (
    STEP_COMPANY, STEP_PLAN, STEP_REPRESENTATIVE, RegistrationState,
    RegistrationWorkflow, register_organization, validate_step,
)


@pytest.fixture()
def form(plans):
    return RegistrationRequest(
        company_name="Acme Widgets",
        company_domain="acme-widgets.com",
        destination_email="Invoices@Acme-Widgets.com",
        representative_name="Jane Doe",
        representative_email="Jane@Acme-Widgets.com",
        representative_password="correct-horse",
        confirm_password="correct-horse",
        selected_plan_id=plans["Starter"].id,
    )


def _counts(store):
    return (store.count(Organization), store.count(Account), store.count(BillingEntry))


# ─── Commit ───────────────────────────────────────────────────────────

def test_registration_starts_thirty_day_trial(store, form):
    now = datetime(2025, 10, 1, 9, 30, tzinfo=timezone.utc)
    result = register_organization(store, form, now=now)

    org = result.organization
    assert org.subscription_status == SubscriptionStatus.TRIAL.value
    assert org.subscription_start_date == now
    assert org.subscription_end_date == now + timedelta(days=30)
    assert org.destination_email == "invoices@acme-widgets.com"
    assert org.domain == "acme-widgets.com"

    assert result.account.email == "jane@acme-widgets.com"
    assert result.account.organization_id == org.id
    assert result.account.password_hash != "correct-horse"

    entry = result.billing_entry
    assert entry.amount == 0
    assert entry.status == "paid"
    assert entry.description == "30-day trial for Starter plan"
    assert entry.next_billing_date == org.subscription_end_date


def test_registration_token_identifies_representative(store, form):
    result = register_organization(store, form)
    claims = validate_session_token(result.token)
    assert claims.account_id == result.account.id
    assert claims.role == "company_representative"


def test_duplicate_account_email_leaves_store_unchanged(store, form, make_account):
    make_account("jane@acme-widgets.com")
    before = _counts(store)

    with pytest.raises(ConflictError, match="already exists"):
        register_organization(store, form)

    assert _counts(store) == before


def test_email_held_by_staff_member_conflicts(store, form, make_organization, make_staff):
    make_staff("JANE@acme-widgets.com", make_organization("Elsewhere Inc"))
    before = _counts(store)

    with pytest.raises(ConflictError):
        register_organization(store, form)

    assert _counts(store) == before
    assert store.count(StaffMember) == 1


def test_unknown_plan_rejected(store, form):
    form.selected_plan_id = 9999
    with pytest.raises(InvalidPlanError, match="Invalid subscription plan selected"):
        register_organization(store, form)
    assert store.count(Organization) == 0


def test_inactive_plan_rejected(store, form, plans):
    store.update(Plan, plans["Starter"].id, {"is_active": False})
    with pytest.raises(InvalidPlanError):
        register_organization(store, form)


def test_missing_fields_rejected(store, form):
    form.company_name = "  "
    with pytest.raises(ValidationFailedError, match="All required fields must be provided"):
        register_organization(store, form)


def test_short_password_rejected(store, form):
    form.representative_password = form.confirm_password = "short"
    with pytest.raises(ValidationFailedError, match="at least 8 characters"):
        register_organization(store, form)


# ─── Step validation ──────────────────────────────────────────────────

@pytest.mark.parametrize("field, value, message", [
    ("company_name", "", "Company name is required"),
    ("destination_email", None, "Destination email is required"),
    ("destination_email", "not-an-email", "Please enter a valid destination email"),
])
def test_company_step_errors(form, field, value, message):
    setattr(form, field, value)
    with pytest.raises(ValidationFailedError, match=message):
        validate_step(STEP_COMPANY, form)


@pytest.mark.parametrize("field, value, message", [
    ("representative_name", " ", "Representative name is required"),
    ("representative_email", "", "Representative email is required"),
    ("representative_email", "jane@", "Please enter a valid representative email"),
    ("representative_password", "", "Password is required"),
    ("confirm_password", "something-else", "Passwords do not match"),
])
def test_representative_step_errors(form, field, value, message):
    setattr(form, field, value)
    with pytest.raises(ValidationFailedError, match=message):
        validate_step(STEP_REPRESENTATIVE, form)


def test_confirmation_is_optional(form):
    form.confirm_password = None
    validate_step(STEP_REPRESENTATIVE, form)


def test_plan_step_requires_selection(form):
    form.selected_plan_id = None
    with pytest.raises(ValidationFailedError, match="Please select a subscription plan"):
        validate_step(STEP_PLAN, form)


# ─── Workflow ─────────────────────────────────────────────────────────

def test_workflow_stays_on_invalid_step():
    workflow = RegistrationWorkflow()
    assert workflow.advance() is False
    assert workflow.current_step == STEP_COMPANY
    assert workflow.error == "Company name is required"


def test_workflow_walks_all_steps_and_commits(store, form):
    workflow = RegistrationWorkflow()
    workflow.update(**form.model_dump(include={"company_name", "company_domain", "destination_email"}))
    assert workflow.advance()
    assert workflow.current_step == STEP_REPRESENTATIVE

    workflow.update(**form.model_dump(include={
        "representative_name", "representative_email", "representative_password", "confirm_password",
    }))
    assert workflow.advance()
    assert workflow.current_step == STEP_PLAN

    workflow.update(selected_plan_id=form.selected_plan_id)
    assert workflow.advance()
    assert workflow.state == RegistrationState.VALIDATED

    result = workflow.commit(store)
    assert workflow.state == RegistrationState.COMMITTED
    assert result.organization.name == "Acme Widgets"


def test_workflow_commit_requires_validation(store):
    workflow = RegistrationWorkflow()
    with pytest.raises(ValidationFailedError):
        workflow.commit(store)
    assert store.count(Organization) == 0


def test_workflow_edit_after_validation_returns_to_draft(form):
    workflow = RegistrationWorkflow(form)
    for _ in range(3):
        assert workflow.advance()
    assert workflow.state == RegistrationState.VALIDATED

    workflow.update(company_name="Acme Gadgets")
    assert workflow.state == RegistrationState.DRAFT


def test_workflow_back_clears_error(form):
    workflow = RegistrationWorkflow(form)
    workflow.advance()
    workflow.update(representative_name="")
    assert workflow.advance() is False
    workflow.back()
    assert workflow.current_step == STEP_COMPANY
    assert workflow.error is None
