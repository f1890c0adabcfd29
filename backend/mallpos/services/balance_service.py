# Overview: Vendor balance derived from purchase and payment history.

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func

from ..extensions import db
from ..models import Purchase, VendorPayment
from ..money import from_cents
from .vendor_service import get_vendor
"""
Vendor Ledger Invariants (authoritative)

- total_purchases = SUM(quantity * unit_price_cents) over the vendor's purchases.
- total_payments  = SUM(amount_cents) over the vendor's payments.
- outstanding     = total_purchases - total_payments (positive: we owe the vendor).
- status: "due" if outstanding > 0, "advance" if < 0, "settled" if exactly 0.

All arithmetic is on integer cents, so "settled" is an exact comparison with
no rounding tolerance. Nothing is cached: every call re-reads both tables, so
the result always matches the current rows (or the call fails as a whole).
"""

STATUS_DUE = "due"
STATUS_ADVANCE = "advance"
STATUS_SETTLED = "settled"


def classify_balance(outstanding_cents: int) -> str:
    if outstanding_cents > 0:
        return STATUS_DUE
    if outstanding_cents < 0:
        return STATUS_ADVANCE
    return STATUS_SETTLED


@dataclass(frozen=True)
class VendorBalance:
    vendor_id: int
    total_purchases_cents: int
    total_payments_cents: int

    @property
    def outstanding_balance_cents(self) -> int:
        return self.total_purchases_cents - self.total_payments_cents

    @property
    def status(self) -> str:
        return classify_balance(self.outstanding_balance_cents)

    def to_dict(self) -> dict:
        return {
            "totalPurchases": from_cents(self.total_purchases_cents),
            "totalPayments": from_cents(self.total_payments_cents),
            "outstandingBalance": from_cents(self.outstanding_balance_cents),
            "status": self.status,
        }


def total_purchases_cents(vendor_id: int) -> int:
    q = db.session.query(
        func.coalesce(func.sum(Purchase.quantity * Purchase.unit_price_cents), 0)
    ).filter(Purchase.vendor_id == vendor_id)
    return int(q.scalar() or 0)


def total_payments_cents(vendor_id: int) -> int:
    q = db.session.query(
        func.coalesce(func.sum(VendorPayment.amount_cents), 0)
    ).filter(VendorPayment.vendor_id == vendor_id)
    return int(q.scalar() or 0)


def get_vendor_balance(vendor_id: int) -> VendorBalance:
    """
    Recompute a vendor's balance from full history.

    Raises:
        VendorNotFoundError: If vendor not found
        SQLAlchemyError: If either read fails (no partial result is returned)
    """
    get_vendor(vendor_id)
    return VendorBalance(
        vendor_id=vendor_id,
        total_purchases_cents=total_purchases_cents(vendor_id),
        total_payments_cents=total_payments_cents(vendor_id),
    )
