# receipt_portal models.py
from typing import Optional, List, Dict
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel, Field
import json


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Stores UTC wall time in a plain DATETIME column and hands back aware
    datetimes, so SQLite (which keeps no offset) round-trips the same value.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        return as_utc(value)


# ============================================================
# ENUMS
# ============================================================
class AccountRole(str, Enum):
    MASTER_ADMIN = "master_admin"
    COMPANY_REPRESENTATIVE = "company_representative"


class SubscriptionStatus(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    TRIAL = "trial"


class BillingCycle(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class StaffRole(str, Enum):
    MANAGER = "manager"
    EMPLOYEE = "employee"


class ReceiptStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    SENT = "sent"


class BillingStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"


class EmailOwner(str, Enum):
    ACCOUNT = "account"
    STAFF = "staff"


# ============================================================
# ORGANIZATION (tenant)
# ============================================================
class Organization(SQLModel, table=True):
    __tablename__ = "organization"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    domain: Optional[str] = Field(default=None, max_length=255)
    destination_email: str = Field(max_length=255)

    subscription_plan_id: Optional[int] = Field(default=None, foreign_key="plan.id", index=True)
    subscription_status: str = Field(default=SubscriptionStatus.INACTIVE.value, max_length=20)
    subscription_start_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    subscription_end_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)


# ============================================================
# PORTAL ACCOUNT
# ============================================================
class Account(SQLModel, table=True):
    __tablename__ = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True, max_length=255, nullable=False)
    password_hash: str = Field(nullable=False)
    name: str = Field(max_length=100)
    role: str = Field(default=AccountRole.COMPANY_REPRESENTATIVE.value, max_length=30, index=True)
    organization_id: Optional[int] = Field(default=None, foreign_key="organization.id", index=True)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    @property
    def is_master_admin(self) -> bool:
        return self.role == AccountRole.MASTER_ADMIN.value

    @property
    def is_representative(self) -> bool:
        return self.role == AccountRole.COMPANY_REPRESENTATIVE.value


# ============================================================
# SUBSCRIPTION PLAN (catalog)
# ============================================================
class Plan(SQLModel, table=True):
    __tablename__ = "plan"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=50, unique=True, nullable=False)
    description: str = Field(default="", max_length=500)
    price: float = Field(default=0.0)
    billing_cycle: str = Field(default=BillingCycle.MONTHLY.value, max_length=20)

    max_users: int = Field(default=5)
    max_receipts_per_month: int = Field(default=100)
    max_storage_mb: int = Field(default=1000)

    # JSON encoded list of feature labels
    features_json: str = Field(default="[]")
    is_active: bool = Field(default=True)

    @property
    def features(self) -> List[str]:
        return json.loads(self.features_json or "[]")


# ============================================================
# STAFF MEMBER (mobile app user)
# ============================================================
class StaffMember(SQLModel, table=True):
    __tablename__ = "staff_member"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True, max_length=255, nullable=False)
    password_hash: str = Field(nullable=False)
    name: str = Field(max_length=100)
    organization_id: int = Field(foreign_key="organization.id", index=True, nullable=False)
    role: str = Field(default=StaffRole.EMPLOYEE.value, max_length=20)
    is_active: bool = Field(default=True)
    created_by: Optional[int] = Field(default=None, foreign_key="account.id")
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


# ============================================================
# RECEIPT (transaction record)
# ============================================================
class Receipt(SQLModel, table=True):
    __tablename__ = "receipt"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Not a foreign key: receipts outlive deleted staff members
    staff_member_id: int = Field(index=True)
    organization_id: int = Field(foreign_key="organization.id", index=True, nullable=False)
    image_path: str = Field(max_length=500)

    merchant_name: Optional[str] = Field(default=None, max_length=200)
    amount: Optional[float] = None
    receipt_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    category: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=2000)

    status: str = Field(default=ReceiptStatus.PENDING.value, max_length=20, index=True)
    email_sent_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=UTCDateTime)


# ============================================================
# BILLING HISTORY (append only)
# ============================================================
class BillingEntry(SQLModel, table=True):
    __tablename__ = "billing_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(foreign_key="organization.id", index=True, nullable=False)
    plan_id: int = Field(foreign_key="plan.id")
    plan_name: str = Field(max_length=50)
    amount: float = Field(default=0.0)
    billing_cycle: str = Field(default=BillingCycle.MONTHLY.value, max_length=20)
    status: str = Field(default=BillingStatus.PAID.value, max_length=20)
    billing_date: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    next_billing_date: datetime = Field(sa_type=UTCDateTime)
    description: str = Field(default="", max_length=500)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


# ============================================================
# EMAIL CLAIM (cross-table uniqueness)
# ============================================================
class EmailClaim(SQLModel, table=True):
    """One row per email address held by an Account or a StaffMember."""

    __tablename__ = "email_claim"

    email: str = Field(primary_key=True, max_length=255)
    owner: str = Field(max_length=20)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


# ============================================================
# REVOKED SESSION TOKENS
# ============================================================
class RevokedToken(SQLModel, table=True):
    __tablename__ = "revoked_token"

    jti: str = Field(primary_key=True, max_length=64)
    account_id: int = Field(foreign_key="account.id", index=True)
    revoked_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    expires_at: datetime = Field(sa_type=UTCDateTime)


# ============================================================
# DEFAULT PLAN CATALOG (constant)
# ============================================================
def default_plan_catalog() -> List[Dict]:
    return [
        {
            "name": "Starter",
            "description": "Perfect for small teams",
            "price": 29.99,
            "billing_cycle": BillingCycle.MONTHLY.value,
            "max_users": 5,
            "max_receipts_per_month": 100,
            "max_storage_mb": 1000,
            "features": ["Email Support", "1GB Storage", "Basic Analytics"],
        },
        {
            "name": "Professional",
            "description": "Growing businesses",
            "price": 59.99,
            "billing_cycle": BillingCycle.MONTHLY.value,
            "max_users": 20,
            "max_receipts_per_month": 500,
            "max_storage_mb": 10000,
            "features": ["Priority Support", "10GB Storage", "Advanced Analytics", "Custom Categories"],
        },
        {
            "name": "Enterprise",
            "description": "Large organizations",
            "price": 149.99,
            "billing_cycle": BillingCycle.MONTHLY.value,
            "max_users": 100,
            "max_receipts_per_month": 2000,
            "max_storage_mb": 100000,
            "features": ["Phone Support", "Unlimited Storage", "Advanced Analytics", "API Access", "Custom Integrations"],
        },
    ]


DEFAULT_PLAN_CATALOG = default_plan_catalog()


# ============================================================
# EXPORTS
# ============================================================
__all__ = [
    "Organization",
    "Account",
    "Plan",
    "StaffMember",
    "Receipt",
    "BillingEntry",
    "EmailClaim",
    "RevokedToken",
    "AccountRole",
    "SubscriptionStatus",
    "BillingCycle",
    "StaffRole",
    "ReceiptStatus",
    "BillingStatus",
    "EmailOwner",
    "DEFAULT_PLAN_CATALOG",
    "utcnow",
    "as_utc",
    "UTCDateTime",
]
