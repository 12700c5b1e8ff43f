# registration_schema.py
from pydantic import Field
from typing import Optional
from datetime import datetime

from schemas.base_schema import CamelModel


class RegistrationRequest(CamelModel):
    # Company information
    company_name: Optional[str] = Field(default=None, max_length=100)
    company_domain: Optional[str] = Field(default=None, max_length=255)
    destination_email: Optional[str] = Field(default=None, max_length=255)

    # Representative information
    representative_name: Optional[str] = Field(default=None, max_length=100)
    representative_email: Optional[str] = Field(default=None, max_length=255)
    representative_password: Optional[str] = None
    confirm_password: Optional[str] = None

    # Subscription
    selected_plan_id: Optional[int] = None


class RegisteredUser(CamelModel):
    id: int
    email: str
    name: str
    role: str
    organization_id: Optional[int] = None


class RegisteredCompany(CamelModel):
    id: int
    name: str
    destination_email: str
    subscription_status: str


class TrialPlan(CamelModel):
    name: str
    trial_end_date: datetime


class RegistrationResponse(CamelModel):
    success: bool = True
    message: str = "Company registration successful"
    user: RegisteredUser
    company: RegisteredCompany
    token: str
    subscription_plan: TrialPlan
