# core/validators.py
from typing import Optional

from pydantic import EmailStr, TypeAdapter, ValidationError

MIN_PASSWORD_LENGTH = 8

# Same checks pydantic applies to EmailStr fields (email-validator, no DNS lookup)
_email_adapter = TypeAdapter(EmailStr)


def is_valid_email(value: Optional[str]) -> bool:
    if not value or not value.strip():
        return False
    try:
        _email_adapter.validate_python(value.strip())
    except ValidationError:
        return False
    return True


def normalize_email(value: str) -> str:
    return value.strip().lower()


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()
