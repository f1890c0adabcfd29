# Overview: Service-layer operations for vendor payments; encapsulates business logic and database work.

"""
Vendor Payment Service

Payments made TO a vendor. They reduce the vendor's outstanding balance and
have no effect on stock or products.
"""

from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..extensions import db
from ..models import VendorPayment
from ..time_utils import normalize_datetime
from ..validation import ValidationError, optional_text
from .vendor_service import get_vendor


# =============================================================================
# PAYMENT MODES (CONSTANTS)
# =============================================================================

MODE_CASH = "cash"
MODE_UPI = "upi"
MODE_BANK_TRANSFER = "bank_transfer"
MODE_CHEQUE = "cheque"
MODE_CARD = "card"
MODE_OTHER = "other"

VALID_PAYMENT_MODES = [
    MODE_CASH,
    MODE_UPI,
    MODE_BANK_TRANSFER,
    MODE_CHEQUE,
    MODE_CARD,
    MODE_OTHER,
]


class PaymentNotFoundError(Exception):
    """Raised when a vendor payment is not found."""
    pass


def normalize_payment_mode(value: str | None) -> str:
    """
    Case-insensitive mode; spaces and dashes become underscores.
    Missing mode defaults to cash.
    """
    if value is None or not str(value).strip():
        return MODE_CASH
    mode = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    if mode not in VALID_PAYMENT_MODES:
        raise ValidationError(
            f"Invalid payment_mode: {value}. Must be one of {', '.join(VALID_PAYMENT_MODES)}"
        )
    return mode


def create_payment(
    *,
    vendor_id: int,
    amount_cents: int,
    payment_mode: str | None = None,
    reference_number: str | None = None,
    transaction_id: str | None = None,
    notes: str | None = None,
    payment_date: datetime | str | None = None,
) -> VendorPayment:
    """
    Record a payment to a vendor.

    Args:
        vendor_id: Vendor being paid
        amount_cents: Amount paid in cents (> 0)
        payment_mode: cash, upi, bank_transfer, cheque, card, other
        reference_number: Cheque number, UTR, etc. (optional)
        transaction_id: Gateway / bank transaction id (optional)
        notes: Free text (optional)
        payment_date: ISO-8601 date/datetime or datetime; defaults to now

    Returns:
        The created VendorPayment

    Raises:
        ValidationError: If amount is not positive, mode or date invalid
        VendorNotFoundError: If vendor does not exist
    """
    if amount_cents is None or amount_cents <= 0:
        raise ValidationError("amount must be greater than 0")
    mode = normalize_payment_mode(payment_mode)

    try:
        paid_at = normalize_datetime(payment_date)
    except ValueError:
        raise ValidationError("payment_date must be an ISO-8601 date or datetime")

    get_vendor(vendor_id)

    payment = VendorPayment(
        vendor_id=vendor_id,
        amount_cents=amount_cents,
        payment_mode=mode,
        reference_number=optional_text(reference_number),
        transaction_id=optional_text(transaction_id),
        notes=optional_text(notes),
        payment_date=paid_at,
    )
    try:
        db.session.add(payment)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Vendor payment recorded id=%s vendor=%s amount_cents=%s mode=%s",
        payment.id, vendor_id, amount_cents, mode,
    )
    return payment


def list_payments(vendor_id: int) -> list[VendorPayment]:
    """Payments for one vendor, most recent payment_date first."""
    return (
        db.session.query(VendorPayment)
        .filter(VendorPayment.vendor_id == vendor_id)
        .order_by(VendorPayment.payment_date.desc(), VendorPayment.id.desc())
        .all()
    )


def list_all_payments() -> list[VendorPayment]:
    return (
        db.session.query(VendorPayment)
        .order_by(VendorPayment.payment_date.desc(), VendorPayment.id.desc())
        .all()
    )


def delete_payment(payment_id: int) -> None:
    """
    Raises:
        PaymentNotFoundError: If payment not found
    """
    payment = db.session.get(VendorPayment, payment_id)
    if payment is None:
        raise PaymentNotFoundError("Payment not found")

    vendor_id = payment.vendor_id
    db.session.delete(payment)
    db.session.commit()
    current_app.logger.info("Vendor payment deleted id=%s vendor=%s", payment_id, vendor_id)
