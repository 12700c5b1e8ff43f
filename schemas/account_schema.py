# account_schema.py
from pydantic import Field
from typing import Optional
from datetime import datetime

from schemas.base_schema import CamelModel


# ---------------------------
# Auth
# ---------------------------
class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


# ---------------------------
# Read
# ---------------------------
class AccountRead(CamelModel):
    # password_hash is deliberately absent
    id: int
    email: str
    name: str
    role: str
    organization_id: Optional[int] = None
    is_active: bool = True
    created_at: datetime


class AccountEnvelope(CamelModel):
    user: AccountRead


class LoginResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: AccountRead
