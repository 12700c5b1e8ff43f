# ================================================================
# services/demo_data.py: Demo tenant for local development
# ================================================================
from datetime import datetime, timedelta
import logging

from core.security import hash_password
from core.store import RecordStore
from models.models import (
    Account, AccountRole, EmailOwner, Organization, Plan, Receipt,
    StaffMember, StaffRole, SubscriptionStatus, as_utc, utcnow,
)
from services.subscription import seed_plan_catalog

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@receiptcapture.com"
REPRESENTATIVE_EMAIL = "rep@techcorp.com"


def _ts(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value))


DEMO_RECEIPTS = [
    # (staff email, merchant, amount, receipt date, category, notes, status, sent at, created at)
    ("staff1@techcorp.com", "Office Depot", 45.99, "2025-09-25T10:30:00", "Office Supplies",
     "Printer paper and pens", "sent", "2025-09-25T11:00:00", "2025-09-25T10:45:00"),
    ("manager@techcorp.com", "Starbucks", 12.50, "2025-09-28T08:15:00", "Meals & Entertainment",
     "Client meeting coffee", "processed", None, "2025-09-28T08:20:00"),
    ("staff1@techcorp.com", "Shell Gas Station", 67.88, "2025-10-01T14:22:00", "Travel & Transportation",
     "Business trip fuel", "pending", None, "2025-10-01T14:25:00"),
    ("manager@techcorp.com", "Best Buy", 299.99, "2025-10-02T11:45:00", "Equipment",
     "Wireless mouse and keyboard", "pending", None, "2025-10-02T12:00:00"),
    ("staff1@techcorp.com", "Amazon Business", 89.95, "2025-10-02T16:30:00", "Office Supplies",
     None, "processed", None, "2025-10-02T16:35:00"),
]


def seed_demo_data(store: RecordStore) -> bool:
    """Load the demo tenant once. Returns False when it is already present."""
    if store.email_in_use(ADMIN_EMAIL):
        logger.info("Demo data already present")
        return False

    seed_plan_catalog(store)
    professional = store.first(Plan, Plan.name == "Professional")
    now = utcnow()

    with store.atomic():
        store.claim_email(ADMIN_EMAIL, EmailOwner.ACCOUNT.value)
        admin = store.create(Account, Account(
            email=ADMIN_EMAIL,
            password_hash=hash_password("admin12345"),
            name="Portal Master Admin",
            role=AccountRole.MASTER_ADMIN.value,
        ))

        company = store.create(Organization, Organization(
            name="Tech Corp Ltd",
            domain="techcorp.com",
            destination_email="invoices@techcorp.com",
            subscription_plan_id=professional.id if professional else None,
            subscription_status=SubscriptionStatus.ACTIVE.value,
            subscription_start_date=now,
            subscription_end_date=now + timedelta(days=30),
            created_at=now,
        ))

        store.claim_email(REPRESENTATIVE_EMAIL, EmailOwner.ACCOUNT.value)
        representative = store.create(Account, Account(
            email=REPRESENTATIVE_EMAIL,
            password_hash=hash_password("password123"),
            name="John Smith",
            role=AccountRole.COMPANY_REPRESENTATIVE.value,
            organization_id=company.id,
        ))

        staff_by_email = {}
        for email, name, role, password in (
            ("staff1@techcorp.com", "Alice Johnson", StaffRole.EMPLOYEE.value, "staff12345"),
            ("manager@techcorp.com", "Bob Wilson", StaffRole.MANAGER.value, "manager12345"),
        ):
            store.claim_email(email, EmailOwner.STAFF.value)
            staff_by_email[email] = store.create(StaffMember, StaffMember(
                email=email,
                password_hash=hash_password(password),
                name=name,
                organization_id=company.id,
                role=role,
                created_by=representative.id,
            ))

        for index, (email, merchant, amount, date, category, notes, status, sent_at, created_at) in enumerate(
            DEMO_RECEIPTS, start=1
        ):
            store.create(Receipt, Receipt(
                staff_member_id=staff_by_email[email].id,
                organization_id=company.id,
                image_path=f"/uploads/receipt-{index}.jpg",
                merchant_name=merchant,
                amount=amount,
                receipt_date=_ts(date),
                category=category,
                notes=notes,
                status=status,
                email_sent_at=_ts(sent_at) if sent_at else None,
                created_at=_ts(created_at),
            ))

    logger.info("Seeded demo tenant %s (admin account %s)", company.id, admin.id)
    return True
