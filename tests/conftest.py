"""
Shared fixtures for the portal tests.

Every test gets its own in-memory SQLite database. The app's session
dependency is overridden to hand out the same session the test uses, so
records created by a fixture are visible to the endpoints and vice versa.
"""

import os

# Set test environment BEFORE any imports that read settings
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from core.database import build_engine, create_db_and_tables, get_session
from core.security import hash_password, issue_session_token
from core.store import RecordStore
from models.models import (
    Account, AccountRole, EmailOwner, Organization, Plan, Receipt,
    StaffMember, StaffRole, SubscriptionStatus, utcnow,
)
from services.subscription import seed_plan_catalog


@pytest.fixture()
def db_session():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture()
def store(db_session):
    store = RecordStore(db_session)
    seed_plan_catalog(store)
    return store


@pytest.fixture()
def plans(store):
    return {plan.name: plan for plan in store.list(Plan)}


@pytest.fixture()
def app(db_session, store):
    from main import app as portal_app

    def _session_override():
        yield db_session

    portal_app.dependency_overrides[get_session] = _session_override
    yield portal_app
    portal_app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    return TestClient(app)


# ─── Record factories ─────────────────────────────────────────────────

@pytest.fixture()
def make_organization(store, plans):
    def _make(name="Tech Corp Ltd", plan_name="Professional", destination_email=None):
        now = utcnow()
        return store.create(Organization, Organization(
            name=name,
            destination_email=destination_email or f"invoices@{name.split()[0].lower()}.com",
            subscription_plan_id=plans[plan_name].id if plan_name else None,
            subscription_status=SubscriptionStatus.ACTIVE.value,
            subscription_start_date=now,
            created_at=now,
        ))
    return _make


@pytest.fixture()
def make_account(store):
    def _make(email, organization=None, role=AccountRole.COMPANY_REPRESENTATIVE.value,
              password="password123", is_active=True):
        store.claim_email(email, EmailOwner.ACCOUNT.value)
        return store.create(Account, Account(
            email=email,
            password_hash=hash_password(password),
            name=email.split("@")[0].title(),
            role=role,
            organization_id=organization.id if organization else None,
            is_active=is_active,
        ))
    return _make


@pytest.fixture()
def make_staff(store):
    def _make(email, organization, role=StaffRole.EMPLOYEE.value, name=None, created_by=None):
        store.claim_email(email, EmailOwner.STAFF.value)
        return store.create(StaffMember, StaffMember(
            email=email,
            password_hash=hash_password("staff12345"),
            name=name or email.split("@")[0].title(),
            organization_id=organization.id,
            role=role,
            created_by=created_by.id if created_by else None,
        ))
    return _make


@pytest.fixture()
def make_receipt(store):
    def _make(staff, created_at, merchant_name=None, amount=None, receipt_date=None,
              category=None, notes=None, status="pending"):
        return store.create(Receipt, Receipt(
            staff_member_id=staff.id,
            organization_id=staff.organization_id,
            image_path=f"/uploads/{merchant_name or 'receipt'}.jpg",
            merchant_name=merchant_name,
            amount=amount,
            receipt_date=receipt_date,
            category=category,
            notes=notes,
            status=status,
            created_at=created_at,
        ))
    return _make


# ─── Tenants ──────────────────────────────────────────────────────────

@pytest.fixture()
def tenant(make_organization, make_account, make_staff, make_receipt):
    """Tech Corp with a representative, two staff members and the sample receipts."""
    org = make_organization("Tech Corp Ltd")
    rep = make_account("rep@techcorp.com", org)
    alice = make_staff("staff1@techcorp.com", org, name="Alice Johnson", created_by=rep)
    bob = make_staff("manager@techcorp.com", org, role=StaffRole.MANAGER.value, name="Bob Wilson", created_by=rep)

    receipts = [
        make_receipt(alice, datetime(2025, 9, 25, 10, 45), "Office Depot", 45.99,
                     datetime(2025, 9, 25, 10, 30), "Office Supplies", "Printer paper and pens", "sent"),
        make_receipt(bob, datetime(2025, 9, 28, 8, 20), "Starbucks", 12.50,
                     datetime(2025, 9, 28, 8, 15), "Meals & Entertainment", "Client meeting coffee", "processed"),
        make_receipt(alice, datetime(2025, 10, 1, 14, 25), "Shell Gas Station", 67.88,
                     datetime(2025, 10, 1, 14, 22), "Travel & Transportation", "Business trip fuel", "pending"),
        make_receipt(bob, datetime(2025, 10, 2, 12, 0), "Best Buy", 299.99,
                     datetime(2025, 10, 2, 11, 45), "Equipment", "Wireless mouse and keyboard", "pending"),
        make_receipt(alice, datetime(2025, 10, 2, 16, 35), "Amazon Business", 89.95,
                     datetime(2025, 10, 2, 16, 30), "Office Supplies", None, "processed"),
    ]
    return {"org": org, "rep": rep, "alice": alice, "bob": bob, "receipts": receipts}


@pytest.fixture()
def other_tenant(make_organization, make_account, make_staff, make_receipt):
    org = make_organization("Other Co", plan_name="Starter")
    rep = make_account("rep@other.com", org)
    carol = make_staff("carol@other.com", org, name="Carol Other", created_by=rep)
    receipt = make_receipt(carol, datetime(2025, 10, 3, 9, 0), "Secret Vendor", 10.0)
    return {"org": org, "rep": rep, "carol": carol, "receipt": receipt}


@pytest.fixture()
def admin(make_account):
    return make_account("admin@receiptcapture.com", role=AccountRole.MASTER_ADMIN.value)


def bearer(account) -> dict:
    return {"Authorization": f"Bearer {issue_session_token(account)}"}


@pytest.fixture()
def auth_headers():
    return bearer
