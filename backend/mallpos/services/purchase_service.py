# Overview: Service-layer operations for vendor purchases; encapsulates business logic and database work.

"""
Purchase Service

A purchase records one delivery of one product from one vendor and, as a
required side effect, adds the delivered quantity to the product's stock.

ATOMICITY:
- create: INSERT purchase + stock increment, one commit
- delete: stock decrement + DELETE purchase, one commit
If any step fails the session is rolled back and neither effect persists,
so a retry of the whole unit can never double-apply a stock change.

Rows are never merged: each call creates a new purchase, even for the same
vendor+product on the same day.
"""

from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..extensions import db
from ..models import Purchase
from ..validation import ValidationError
from .concurrency import run_with_retry
from .products_service import get_product, apply_stock_delta
from .vendor_service import get_vendor


class PurchaseNotFoundError(Exception):
    """Raised when a purchase is not found."""
    pass


def create_purchase(
    *,
    vendor_id: int,
    product_id: int,
    quantity: int,
    unit_price_cents: int,
    purchased_at: datetime | None = None,
) -> Purchase:
    """
    Record a delivery and add its quantity to product stock.

    Args:
        vendor_id: Supplying vendor
        product_id: Delivered product
        quantity: Units delivered (> 0)
        unit_price_cents: Cost per unit in cents (> 0)
        purchased_at: Business time (UTC-naive); defaults to now

    Returns:
        The created Purchase

    Raises:
        ValidationError: If quantity or price is not positive
        VendorNotFoundError: If vendor does not exist
        ProductNotFoundError: If product does not exist
    """
    if quantity is None or quantity <= 0:
        raise ValidationError("quantity must be greater than 0")
    if unit_price_cents is None or unit_price_cents <= 0:
        raise ValidationError("price must be greater than 0")

    def _op():
        get_vendor(vendor_id)
        product = get_product(product_id, lock=True)

        purchase = Purchase(
            vendor_id=vendor_id,
            product_id=product_id,
            quantity=quantity,
            unit_price_cents=unit_price_cents,
        )
        if purchased_at is not None:
            purchase.purchased_at = purchased_at
        db.session.add(purchase)

        apply_stock_delta(product, quantity, reason="purchase")
        db.session.commit()
        return purchase

    purchase = run_with_retry(_op)
    current_app.logger.info(
        "Purchase created id=%s vendor=%s product=%s qty=%s unit_price_cents=%s",
        purchase.id, vendor_id, product_id, quantity, unit_price_cents,
    )
    return purchase


def get_purchase(purchase_id: int) -> Purchase:
    """
    Raises:
        PurchaseNotFoundError: If purchase not found
    """
    purchase = db.session.get(Purchase, purchase_id)
    if purchase is None:
        raise PurchaseNotFoundError("Purchase not found")
    return purchase


def list_purchases(
    *,
    vendor_id: int | None = None,
    product_id: int | None = None,
) -> list[Purchase]:
    """All purchases, optionally filtered, most recent first."""
    query = db.session.query(Purchase)
    if vendor_id is not None:
        query = query.filter(Purchase.vendor_id == vendor_id)
    if product_id is not None:
        query = query.filter(Purchase.product_id == product_id)
    return query.order_by(Purchase.purchased_at.desc(), Purchase.id.desc()).all()


def find_latest_purchase(*, vendor_id: int, product_id: int) -> Purchase | None:
    """Most recent purchase of product from vendor, or None."""
    return (
        db.session.query(Purchase)
        .filter(Purchase.vendor_id == vendor_id, Purchase.product_id == product_id)
        .order_by(Purchase.purchased_at.desc(), Purchase.id.desc())
        .first()
    )


def delete_purchase(purchase_id: int) -> None:
    """
    Reverse a purchase: remove its quantity from stock, then delete it.

    A second delete of the same id raises PurchaseNotFoundError and leaves
    stock untouched.

    Raises:
        PurchaseNotFoundError: If purchase not found
        ProductNotFoundError: If the purchased product no longer exists
    """
    def _op():
        purchase = get_purchase(purchase_id)
        product = get_product(purchase.product_id, lock=True)
        quantity = purchase.quantity

        apply_stock_delta(product, -quantity, reason=f"purchase {purchase_id} reversal")
        db.session.delete(purchase)
        db.session.commit()
        return product.id, quantity

    product_id, quantity = run_with_retry(_op)
    current_app.logger.info(
        "Purchase deleted id=%s product=%s stock reversed by %s",
        purchase_id, product_id, quantity,
    )

