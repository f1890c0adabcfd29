# backend/mallpos/services/products_service.py
"""
Products Service

Product master data plus the stock counter.

STOCK INVARIANTS:
- Manual adjustments (adjust_stock / set_stock) may never leave stock negative.
- Purchase create/delete and bill creation change stock through
  apply_stock_delta() inside their own transaction; these are always applied
  exactly, even if they take stock below zero, and that is logged.
- PUT-style updates that carry "stock" overwrite it under the row lock, the
  same way set_stock() does.
"""
from __future__ import annotations

from flask import current_app

from ..barcode_utils import parse_embedded_price_ean13
from ..extensions import db
from ..models import BillItem, Product, Purchase
from ..validation import ConflictError, ValidationError
from .concurrency import lock_for_update, run_with_retry
from .vendor_service import get_vendor, VendorNotFoundError

# stock is not here: it only changes through the locked paths below
PRODUCT_MUTABLE_FIELDS = {
    "name", "barcode", "price_cents", "wholesale_price_cents", "vendor_id",
    "gst_rate_bps", "is_gst_exempt",
}


class ProductNotFoundError(Exception):
    """Raised when a product is not found."""
    pass


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _ensure_barcode_free(barcode: str | None, *, exclude_id: int | None = None) -> None:
    if not barcode:
        return
    query = db.session.query(Product.id).filter(Product.barcode == barcode)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ConflictError("Barcode already exists for another product.")


def _ensure_vendor_exists(vendor_id: int | None) -> None:
    if vendor_id is None:
        return
    try:
        get_vendor(vendor_id)
    except VendorNotFoundError:
        raise ValidationError(f"Vendor {vendor_id} not found")


def list_products() -> list[Product]:
    """All products, newest first."""
    return db.session.query(Product).order_by(Product.id.desc()).all()


def list_low_stock(threshold: int | None = None) -> list[Product]:
    """Products whose stock is at or below threshold, lowest stock first."""
    if threshold is None:
        threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 5)
    return (
        db.session.query(Product)
        .filter(Product.stock <= threshold)
        .order_by(Product.stock.asc(), Product.name.asc())
        .all()
    )


def get_product(product_id: int, *, lock: bool = False) -> Product:
    """
    Get a product by ID.

    Raises:
        ProductNotFoundError: If product not found
    """
    query = db.session.query(Product).filter_by(id=product_id)
    if lock:
        query = lock_for_update(query)
    product = query.first()
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product


def get_product_by_barcode(code: str) -> Product | None:
    if not code:
        return None
    return db.session.query(Product).filter(Product.barcode == code.strip()).first()


def scan_product(code: str) -> tuple[Product, int | None]:
    """
    Resolve a scanned code to a product.

    Exact barcode match first; otherwise a variable-weight EAN-13 is decoded
    and its item code looked up, with the embedded price overriding the
    catalog price.

    Returns:
        (product, override_price_cents or None)

    Raises:
        ProductNotFoundError: If neither lookup matches
    """
    product = get_product_by_barcode(code)
    if product is not None:
        return product, None

    embedded = parse_embedded_price_ean13(code)
    if embedded is not None:
        product = get_product_by_barcode(embedded.base_code)
        if product is not None:
            return product, embedded.price_cents

    raise ProductNotFoundError("Product not found")


def create_product(*, patch: dict) -> Product:
    """
    Create product using a validated patch dict.

    Raises:
        ValidationError: If name/price missing or vendor_id unknown
        ConflictError: If barcode already exists
    """
    if not patch.get("name"):
        raise ValidationError("name is required")
    if patch.get("price_cents") is None:
        raise ValidationError("price is required")

    _ensure_barcode_free(patch.get("barcode"))
    _ensure_vendor_exists(patch.get("vendor_id"))

    stock = patch.get("stock") or 0
    if stock < 0:
        raise ValidationError("stock must be >= 0")

    p = Product(stock=stock, wholesale_price_cents=0)
    apply_product_patch(p, patch)
    if p.wholesale_price_cents is None:
        p.wholesale_price_cents = 0

    db.session.add(p)
    db.session.commit()
    current_app.logger.info("Product created id=%s name=%r stock=%s", p.id, p.name, p.stock)
    return p


def update_product(product_id: int, *, patch: dict) -> Product:
    """
    Partially update a product.

    The row is locked for the whole unit. A "stock" key overwrites the
    counter the same way set_stock() does.

    Raises:
        ProductNotFoundError: If product not found
        ValidationError: If name/price/stock set to null, stock negative or vendor_id unknown
        ConflictError: If barcode collides with another product
    """
    if "name" in patch and not patch["name"]:
        raise ValidationError("name cannot be empty")
    if "price_cents" in patch and patch["price_cents"] is None:
        raise ValidationError("price cannot be null")
    if "barcode" in patch:
        _ensure_barcode_free(patch["barcode"], exclude_id=product_id)
    if "vendor_id" in patch:
        _ensure_vendor_exists(patch["vendor_id"])
    if "stock" in patch:
        _check_stock_value(patch["stock"])

    def _op():
        p = get_product(product_id, lock=True)
        apply_product_patch(p, patch)
        if "stock" in patch:
            _overwrite_stock(p, patch["stock"])
        db.session.commit()
        return p

    return run_with_retry(_op)


def delete_product(product_id: int) -> None:
    """
    Delete a product.

    Raises:
        ProductNotFoundError: If product not found
        ConflictError: If purchases or bills still reference the product
    """
    p = get_product(product_id)

    if db.session.query(Purchase.id).filter(Purchase.product_id == product_id).first():
        raise ConflictError(
            "Cannot delete product. It has purchase history. Please remove its purchases first."
        )
    if db.session.query(BillItem.id).filter(BillItem.product_id == product_id).first():
        raise ConflictError("Cannot delete product. It has sales history.")

    db.session.delete(p)
    db.session.commit()
    current_app.logger.info("Product deleted id=%s", product_id)


def apply_stock_delta(product: Product, delta: int, *, reason: str) -> int:
    """
    Apply a stock change to an already-loaded (ideally locked) product.

    Does NOT commit: the caller owns the transaction so the stock change
    lands together with the event that caused it.

    Returns:
        The new stock value
    """
    before = product.stock or 0
    product.stock = before + delta
    if product.stock < 0:
        current_app.logger.warning(
            "Stock for product %s went negative (%s -> %s) on %s",
            product.id, before, product.stock, reason,
        )
    current_app.logger.info(
        "Stock product=%s %s%s: %s -> %s",
        product.id, "+" if delta >= 0 else "", delta, before, product.stock,
    )
    return product.stock


def _check_stock_value(value: int | None) -> None:
    if value is None:
        raise ValidationError("stock cannot be null")
    if value < 0:
        raise ValidationError("stock must be >= 0")


def _overwrite_stock(product: Product, value: int) -> None:
    """Set an absolute stock value on a locked product. Does NOT commit."""
    before = product.stock
    product.stock = value
    current_app.logger.info("Stock product=%s set: %s -> %s", product.id, before, value)


def adjust_stock(product_id: int, delta: int) -> Product:
    """
    Increment (or decrement) stock by delta.

    Raises:
        ProductNotFoundError: If product not found
        ValidationError: If delta is zero or the result would be negative
    """
    if delta == 0:
        raise ValidationError("delta must be non-zero")

    def _op():
        p = get_product(product_id, lock=True)
        if (p.stock or 0) + delta < 0:
            raise ValidationError(
                f"Insufficient stock: on hand {p.stock}, adjustment {delta}"
            )
        apply_stock_delta(p, delta, reason="manual adjustment")
        db.session.commit()
        return p

    return run_with_retry(_op)


def set_stock(product_id: int, value: int) -> Product:
    """
    Overwrite stock with an absolute value (e.g. after a physical count).

    Raises:
        ProductNotFoundError: If product not found
        ValidationError: If value is negative
    """
    _check_stock_value(value)

    def _op():
        p = get_product(product_id, lock=True)
        _overwrite_stock(p, value)
        db.session.commit()
        return p

    return run_with_retry(_op)
