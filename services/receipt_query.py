# ================================================================
# services/receipt_query.py: Receipt filtering, sorting, paging
# ================================================================
"""
Shapes an organization's receipts for the list endpoint.

The steps run in a fixed order: ``apply_filters`` (status, date range,
amount range, free-text search), ``sort_newest_first`` and ``paginate``.
``receipt_stats`` summarises the unfiltered set.
"""
from dataclasses import dataclass
from datetime import datetime
from math import ceil
from typing import Iterable, List, Optional, Sequence, TypeVar

from core.errors import ValidationFailedError
from models.models import Receipt, ReceiptStatus, as_utc

T = TypeVar("T")

ALL_STATUSES = "all"


@dataclass
class ReceiptFilters:
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    search: Optional[str] = None


@dataclass
class Page:
    items: list
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def _effective_date(receipt: Receipt) -> datetime:
    return as_utc(receipt.receipt_date or receipt.created_at)


def _matches_search(receipt: Receipt, needle: str) -> bool:
    for value in (receipt.merchant_name, receipt.notes, receipt.category):
        if value and needle in value.lower():
            return True
    return False


def apply_filters(receipts: Iterable[Receipt], filters: ReceiptFilters) -> List[Receipt]:
    result = list(receipts)

    if filters.status and filters.status != ALL_STATUSES:
        result = [r for r in result if r.status == filters.status]

    if filters.start_date is not None:
        start = as_utc(filters.start_date)
        result = [r for r in result if _effective_date(r) >= start]

    if filters.end_date is not None:
        end = as_utc(filters.end_date)
        result = [r for r in result if _effective_date(r) <= end]

    # A receipt without an amount counts as zero
    if filters.min_amount is not None:
        result = [r for r in result if (r.amount or 0) >= filters.min_amount]

    if filters.max_amount is not None:
        result = [r for r in result if (r.amount or 0) <= filters.max_amount]

    if filters.search:
        needle = filters.search.lower()
        result = [r for r in result if _matches_search(r, needle)]

    return result


def sort_newest_first(receipts: Sequence[Receipt]) -> List[Receipt]:
    # sorted() is stable, so equal timestamps keep insertion order
    return sorted(receipts, key=lambda r: as_utc(r.created_at), reverse=True)


def paginate(items: Sequence[T], page: int, limit: int) -> Page:
    if limit <= 0:
        raise ValidationFailedError("limit must be a positive integer")
    if page <= 0:
        raise ValidationFailedError("page must be a positive integer")

    total = len(items)
    total_pages = ceil(total / limit)
    start = (page - 1) * limit
    return Page(
        items=list(items[start:start + limit]),
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def receipt_stats(receipts: Iterable[Receipt]) -> dict:
    receipts = list(receipts)
    stats = {"total": len(receipts)}
    for status in ReceiptStatus:
        stats[status.value] = sum(1 for r in receipts if r.status == status.value)
    return stats
