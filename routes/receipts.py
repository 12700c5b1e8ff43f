# routes/receipts.py
from datetime import datetime
from typing import Dict, Optional
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from models.models import Account, Organization, Receipt, ReceiptStatus, StaffMember, as_utc, utcnow
from schemas.receipt_schema import PaginationRead, ReceiptPage, ReceiptRead, ReceiptStats, ReceiptUpdate
from core.errors import NotFoundError, ValidationFailedError
from core.store import RecordStore, get_store
from core.security import ensure_organization_access, get_current_representative
from services.email_service import email_service
from services.receipt_query import (
    ReceiptFilters, apply_filters, paginate, receipt_stats, sort_newest_first,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Receipts"])

RECEIPT_STATUSES = {s.value for s in ReceiptStatus}


# -------------------------
# Helper Functions
# -------------------------
def parse_date_param(value: Optional[str], name: str) -> Optional[datetime]:
    """ISO date or datetime query value as aware UTC; no offset means UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationFailedError(f"{name} must be an ISO 8601 date")
    return as_utc(parsed)


def to_receipt_read(receipt: Receipt, staff_by_id: Dict[int, StaffMember]) -> ReceiptRead:
    staff = staff_by_id.get(receipt.staff_member_id)
    return ReceiptRead.model_validate({
        **receipt.model_dump(),
        "user_name": staff.name if staff else "Unknown User",
        "user_email": staff.email if staff else "",
    })


def _staff_index(store: RecordStore, organization_id: int) -> Dict[int, StaffMember]:
    return {s.id: s for s in store.list(StaffMember, StaffMember.organization_id == organization_id)}


def _load_receipt(store: RecordStore, receipt_id: int, current_account: Account) -> Receipt:
    receipt = store.get(Receipt, receipt_id)
    if not receipt:
        raise NotFoundError("Receipt not found")
    ensure_organization_access(current_account, receipt.organization_id)
    return receipt


# -------------------------
# Routes
# -------------------------
@router.get("", response_model=ReceiptPage)
def list_receipts(
    status: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    min_amount: Optional[float] = Query(default=None, alias="minAmount"),
    max_amount: Optional[float] = Query(default=None, alias="maxAmount"),
    search: Optional[str] = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=10),
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    """Filtered, newest-first, paginated receipts for the representative's organization."""
    organization_id = current_account.organization_id
    if not store.get(Organization, organization_id):
        raise NotFoundError("User or company not found")

    filters = ReceiptFilters(
        status=status,
        start_date=parse_date_param(start_date, "startDate"),
        end_date=parse_date_param(end_date, "endDate"),
        min_amount=min_amount,
        max_amount=max_amount,
        search=search,
    )

    # Snapshot in insertion order so the stable sort breaks ties by it
    all_receipts = store.list(Receipt, Receipt.organization_id == organization_id, order_by=Receipt.id)
    result = paginate(sort_newest_first(apply_filters(all_receipts, filters)), page, limit)

    staff_by_id = _staff_index(store, organization_id)
    return ReceiptPage(
        receipts=[to_receipt_read(r, staff_by_id) for r in result.items],
        pagination=PaginationRead(**result.pagination()),
        stats=ReceiptStats(**receipt_stats(all_receipts)),
    )


@router.get("/{receipt_id}", response_model=ReceiptRead)
def get_receipt(
    receipt_id: int,
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    receipt = _load_receipt(store, receipt_id, current_account)
    return to_receipt_read(receipt, _staff_index(store, receipt.organization_id))


@router.put("/{receipt_id}", response_model=ReceiptRead)
def update_receipt(
    receipt_id: int,
    payload: ReceiptUpdate,
    background_tasks: BackgroundTasks,
    current_account: Account = Depends(get_current_representative),
    store: RecordStore = Depends(get_store),
):
    """Representatives review receipts: change status and notes only."""
    receipt = _load_receipt(store, receipt_id, current_account)
    changes = payload.model_dump(exclude_unset=True)

    fields = {}
    new_status = changes.get("status")
    if new_status:
        if new_status not in RECEIPT_STATUSES:
            raise ValidationFailedError("Invalid status")
        fields["status"] = new_status
        if new_status == ReceiptStatus.SENT.value:
            fields["email_sent_at"] = utcnow()
    if "notes" in changes:
        fields["notes"] = changes["notes"]

    if fields:
        receipt = store.update(Receipt, receipt_id, fields)

    staff_by_id = _staff_index(store, receipt.organization_id)

    if fields.get("status") == ReceiptStatus.SENT.value:
        organization = store.get(Organization, receipt.organization_id)
        submitter = staff_by_id.get(receipt.staff_member_id)
        background_tasks.add_task(
            email_service.send_receipt_email,
            organization.destination_email,
            organization.name,
            receipt.merchant_name,
            receipt.amount,
            submitter.name if submitter else "Unknown User",
            receipt.image_path,
        )
        logger.info("Receipt %s queued for forwarding to organization %s", receipt.id, organization.id)

    return to_receipt_read(receipt, staff_by_id)
