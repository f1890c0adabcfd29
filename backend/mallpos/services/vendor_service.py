# Overview: Service-layer operations for vendors; encapsulates business logic and database work.

"""
Vendor Service

Vendors are the counterparty of every purchase and vendor payment.

DESIGN:
- Products may be sourced from multiple vendors; the direct assignment on
  Product.vendor_id is only the "primary" vendor
- A vendor with purchase history or assigned products cannot be deleted,
  because that would orphan ledger rows
- Deleting a vendor removes its payments in the same transaction
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Vendor, Purchase, Product, VendorPayment
from ..validation import ConflictError

VENDOR_MUTABLE_FIELDS = {
    "name", "contact_name", "phone", "email", "address",
    "gst_number", "payment_terms_days", "notes",
}


class VendorNotFoundError(Exception):
    """Raised when a vendor is not found."""
    pass


class VendorValidationError(Exception):
    """Raised when vendor data fails validation."""
    pass


def apply_vendor_patch(vendor: Vendor, patch: dict) -> None:
    for k, v in patch.items():
        if k not in VENDOR_MUTABLE_FIELDS:
            continue
        setattr(vendor, k, v)


def create_vendor(*, patch: dict) -> Vendor:
    """
    Create a new vendor from a validated patch.

    Raises:
        VendorValidationError: If name is missing
    """
    name = (patch.get("name") or "").strip()
    if not name:
        raise VendorValidationError("Vendor name required")

    vendor = Vendor()
    apply_vendor_patch(vendor, patch)
    vendor.name = name
    if vendor.payment_terms_days is None:
        vendor.payment_terms_days = 30

    db.session.add(vendor)
    db.session.commit()
    current_app.logger.info("Vendor created id=%s name=%r", vendor.id, vendor.name)
    return vendor


def get_vendor(vendor_id: int) -> Vendor:
    """
    Get a vendor by ID.

    Raises:
        VendorNotFoundError: If vendor not found
    """
    vendor = db.session.get(Vendor, vendor_id)
    if not vendor:
        raise VendorNotFoundError(f"Vendor {vendor_id} not found")
    return vendor


def list_vendors(*, search: str | None = None) -> list[Vendor]:
    """List vendors ordered by name, optionally filtered by name/phone/email."""
    query = db.session.query(Vendor)

    if search:
        search_term = f"%{search.strip()}%"
        query = query.filter(
            db.or_(
                Vendor.name.ilike(search_term),
                Vendor.phone.ilike(search_term),
                Vendor.email.ilike(search_term),
            )
        )

    return query.order_by(Vendor.name.asc(), Vendor.id.asc()).all()


def list_vendors_with_products() -> list[Vendor]:
    """Vendors directly assigned to at least one product."""
    return (
        db.session.query(Vendor)
        .join(Product, Product.vendor_id == Vendor.id)
        .distinct()
        .order_by(Vendor.name.asc(), Vendor.id.asc())
        .all()
    )


def update_vendor(vendor_id: int, *, patch: dict) -> Vendor:
    """
    Partially update a vendor.

    Raises:
        VendorNotFoundError: If vendor not found
        VendorValidationError: If name would become blank
    """
    vendor = get_vendor(vendor_id)

    if "name" in patch:
        name = (patch["name"] or "").strip()
        if not name:
            raise VendorValidationError("Vendor name cannot be empty")
        patch = {**patch, "name": name}

    apply_vendor_patch(vendor, patch)
    db.session.commit()
    return vendor


def delete_vendor(vendor_id: int) -> None:
    """
    Delete a vendor and its payments.

    Raises:
        VendorNotFoundError: If vendor not found
        ConflictError: If the vendor has purchase history or assigned products
    """
    vendor = get_vendor(vendor_id)

    has_purchases = db.session.query(Purchase.id).filter(Purchase.vendor_id == vendor_id).first()
    if has_purchases:
        raise ConflictError(
            "Cannot delete vendor. This vendor has purchase history. "
            "Please remove all purchases first."
        )

    has_products = db.session.query(Product.id).filter(Product.vendor_id == vendor_id).first()
    if has_products:
        raise ConflictError(
            "Cannot delete vendor. This vendor has products assigned. "
            "Please reassign or remove products first."
        )

    try:
        payments = db.session.query(VendorPayment).filter(VendorPayment.vendor_id == vendor_id).all()
        for payment in payments:
            db.session.delete(payment)
        removed_payments = len(payments)
        db.session.delete(vendor)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Vendor deleted id=%s (removed %d payments)", vendor_id, removed_payments
    )
