# routes/staff.py
from fastapi import APIRouter, Depends, Query, status
from typing import Optional
import logging

from models.models import Account, EmailOwner, StaffMember, StaffRole, utcnow
from schemas.staff_schema import StaffCreate, StaffEnvelope, StaffList, StaffRead, StaffUpdate
from core.errors import ForbiddenError, NotFoundError, ValidationFailedError
from core.store import RecordStore, get_store
from core.validators import MIN_PASSWORD_LENGTH, is_blank, is_valid_email, normalize_email
from core.security import (
    ensure_organization_access, get_current_account,
    get_current_representative, hash_password,
)

logger = logging.getLogger(__name__)


router = APIRouter(tags=["Staff"])

STAFF_ROLES = {role.value for role in StaffRole}


def _load_staff(store: RecordStore, staff_id: int, current_account: Account) -> StaffMember:
    staff = store.get(StaffMember, staff_id)
    if not staff:
        raise NotFoundError("Staff user not found")
    ensure_organization_access(current_account, staff.organization_id)
    return staff


# ----------------------------------------------------------------------
# ✅ List Staff (scoped by role)
# ----------------------------------------------------------------------
@router.get("", response_model=StaffList)
def list_staff(
    company_id: Optional[int] = Query(default=None, alias="companyId"),
    current_account: Account = Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    """Representatives see their own organization; portal admins see everyone."""
    if current_account.is_representative and current_account.organization_id:
        staff = store.list(
            StaffMember,
            StaffMember.organization_id == current_account.organization_id,
            order_by=StaffMember.id,
        )
        return StaffList(staff=[StaffRead.model_validate(s) for s in staff])

    if current_account.is_master_admin:
        if company_id is not None:
            staff = store.list(StaffMember, StaffMember.organization_id == company_id, order_by=StaffMember.id)
        else:
            staff = store.list(StaffMember, order_by=StaffMember.id)
        return StaffList(staff=[StaffRead.model_validate(s) for s in staff])

    raise ForbiddenError("Unauthorized")


# ----------------------------------------------------------------------
# ✅ Create Staff (Representative only)
# ----------------------------------------------------------------------
@router.post("", response_model=StaffEnvelope, status_code=status.HTTP_201_CREATED)
def create_staff(
    payload: StaffCreate,
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    if any(is_blank(value) for value in (payload.email, payload.name, payload.role, payload.password)):
        raise ValidationFailedError("All fields are required")
    if not is_valid_email(payload.email):
        raise ValidationFailedError("Invalid email format")
    if payload.role not in STAFF_ROLES:
        raise ValidationFailedError("Invalid role")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailedError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    email = normalize_email(payload.email)
    with store.atomic():
        store.claim_email(email, EmailOwner.STAFF.value)
        staff = store.create(StaffMember, StaffMember(
            email=email,
            name=payload.name.strip(),
            password_hash=hash_password(payload.password),
            organization_id=current_account.organization_id,
            role=payload.role,
            is_active=True,
            created_by=current_account.id,
            created_at=utcnow(),
        ))

    logger.info("Staff member %s created in organization %s", staff.id, staff.organization_id)
    return StaffEnvelope(staff=StaffRead.model_validate(staff), message="Staff user created successfully")


# ----------------------------------------------------------------------
# ✅ Update Staff (own organization or portal admin)
# ----------------------------------------------------------------------
@router.put("/{staff_id}", response_model=StaffEnvelope)
def update_staff(
    staff_id: int,
    payload: StaffUpdate,
    current_account: Account = Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    staff = _load_staff(store, staff_id, current_account)
    changes = payload.model_dump(exclude_unset=True)

    # Validate everything before touching the store
    if "email" in changes and not is_valid_email(changes["email"]):
        raise ValidationFailedError("Invalid email format")
    if "role" in changes and changes["role"] not in STAFF_ROLES:
        raise ValidationFailedError("Invalid role")
    if "name" in changes and is_blank(changes["name"]):
        raise ValidationFailedError("Name is required")
    if "is_active" in changes and changes["is_active"] is None:
        raise ValidationFailedError("isActive must be true or false")
    if "password" in changes and (not changes["password"] or len(changes["password"]) < MIN_PASSWORD_LENGTH):
        raise ValidationFailedError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    fields = {}
    if "email" in changes:
        fields["email"] = normalize_email(changes["email"])
    if "name" in changes:
        fields["name"] = changes["name"].strip()
    if "role" in changes:
        fields["role"] = changes["role"]
    if "is_active" in changes:
        fields["is_active"] = changes["is_active"]
    if "password" in changes:
        fields["password_hash"] = hash_password(changes["password"])

    old_email = staff.email
    with store.atomic():
        if "email" in fields and fields["email"] != old_email:
            store.claim_email(fields["email"], EmailOwner.STAFF.value)
            store.release_email(old_email)
        staff = store.update(StaffMember, staff_id, fields)

    logger.info("Staff member %s updated by account %s", staff_id, current_account.id)
    return StaffEnvelope(staff=StaffRead.model_validate(staff), message="Staff user updated successfully")


# ----------------------------------------------------------------------
# ✅ Delete Staff (own organization or portal admin)
# ----------------------------------------------------------------------
@router.delete("/{staff_id}", status_code=status.HTTP_200_OK)
def delete_staff(
    staff_id: int,
    current_account: Account = Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    staff = _load_staff(store, staff_id, current_account)
    email = staff.email

    with store.atomic():
        store.delete(StaffMember, staff_id)
        store.release_email(email)

    logger.info("Staff member %s deleted by account %s", staff_id, current_account.id)
    return {"message": "Staff user deleted successfully"}
