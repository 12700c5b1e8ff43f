from .base_schema import CamelModel
from .account_schema import LoginRequest, LoginResponse, AccountRead, AccountEnvelope
from .subscription_schema import (
    PlanRead, PlanList, BillingEntryRead, PlanChangeRequest,
    UsageLimits, MonthlyUsage, UsagePercentage, UsageRead,
)
from .organization_schema import (
    OrganizationRead, CompanySettingsUpdate, CompanySettingsRead,
    CompanySettingsUpdated, SettingsUsage, SubscriptionSummary,
    CompanyStats, CompanyList, CompanyEnvelope,
)
from .staff_schema import StaffCreate, StaffUpdate, StaffRead, StaffList, StaffEnvelope
from .receipt_schema import ReceiptRead, ReceiptUpdate, PaginationRead, ReceiptStats, ReceiptPage
from .registration_schema import (
    RegistrationRequest, RegistrationResponse,
    RegisteredUser, RegisteredCompany, TrialPlan,
)

__all__ = [
    "CamelModel",

    # Account
    "LoginRequest", "LoginResponse", "AccountRead", "AccountEnvelope",

    # Subscription
    "PlanRead", "PlanList", "BillingEntryRead", "PlanChangeRequest",
    "UsageLimits", "MonthlyUsage", "UsagePercentage", "UsageRead",

    # Organization
    "OrganizationRead", "CompanySettingsUpdate", "CompanySettingsRead",
    "CompanySettingsUpdated", "SettingsUsage", "SubscriptionSummary",
    "CompanyStats", "CompanyList", "CompanyEnvelope",

    # Staff
    "StaffCreate", "StaffUpdate", "StaffRead", "StaffList", "StaffEnvelope",

    # Receipt
    "ReceiptRead", "ReceiptUpdate", "PaginationRead", "ReceiptStats", "ReceiptPage",

    # Registration
    "RegistrationRequest", "RegistrationResponse",
    "RegisteredUser", "RegisteredCompany", "TrialPlan",
]
