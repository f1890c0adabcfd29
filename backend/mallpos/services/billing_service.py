# Overview: Service-layer operations for counter sales (bills) and sales reporting.

"""
Billing Service

A bill records one counter sale and, as a required side effect, takes the
sold quantities out of stock.

ATOMICITY:
- create: INSERT bill + INSERT items + stock decrement per item, one commit
If any step fails (unknown product, datastore error) the session is rolled
back and neither the bill nor any stock change persists.

Products are locked in ascending id order so two bills sharing products
cannot deadlock each other. A sale may take stock below zero (the shelf
count is behind the till); that is logged, not refused.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from sqlalchemy import desc, func

from ..extensions import db
from ..models import Bill, BillItem, Product
from ..money import from_cents
from ..time_utils import to_utc_z, utcnow
from ..validation import ValidationError, optional_text
from .concurrency import run_with_retry
from .products_service import get_product, apply_stock_delta

BILL_PAYMENT_METHODS = ("cash", "card", "upi")

# Reporting windows, in days back from the start of today (UTC)
PERIOD_DAYS = {"today": 0, "week": 7, "month": 30, "year": 365}

MAX_REPORT_DAYS = 3660
MAX_TOP_PRODUCTS = 100


class BillNotFoundError(Exception):
    """Raised when a bill is not found."""
    pass


@dataclass(frozen=True)
class BillLine:
    """A requested line: catalog price applies unless unit_price_cents is given."""
    product_id: int
    quantity: int
    unit_price_cents: int | None = None


def normalize_payment_method(raw: str | None) -> str:
    if raw is None or not str(raw).strip():
        return "cash"
    method = str(raw).strip().lower()
    if method not in BILL_PAYMENT_METHODS:
        raise ValidationError(
            f"Invalid paymentMethod. Must be one of: {', '.join(BILL_PAYMENT_METHODS)}"
        )
    return method


def create_bill(
    *,
    lines: list[BillLine],
    payment_method: str | None = None,
    customer_name: str | None = None,
    customer_phone: str | None = None,
) -> Bill:
    """
    Record a sale and decrement stock for every line.

    Returns:
        The created Bill (items loaded)

    Raises:
        ValidationError: If there are no lines, a quantity is not positive,
            a price override is negative or the payment method is unknown
        ProductNotFoundError: If any line names an unknown product
    """
    if not lines:
        raise ValidationError("No items to bill")
    for line in lines:
        if line.quantity is None or line.quantity <= 0:
            raise ValidationError("quantity must be greater than 0")
        if line.unit_price_cents is not None and line.unit_price_cents < 0:
            raise ValidationError("price must be >= 0")
    method = normalize_payment_method(payment_method)

    def _op():
        products = {
            product_id: get_product(product_id, lock=True)
            for product_id in sorted({line.product_id for line in lines})
        }

        bill = Bill(
            total_cents=0,
            payment_method=method,
            customer_name=optional_text(customer_name),
            customer_phone=optional_text(customer_phone),
        )
        db.session.add(bill)

        total = 0
        for line in lines:
            product = products[line.product_id]
            unit_price = product.price_cents if line.unit_price_cents is None else line.unit_price_cents
            subtotal = unit_price * line.quantity
            bill.items.append(
                BillItem(
                    product=product,
                    quantity=line.quantity,
                    unit_price_cents=unit_price,
                    subtotal_cents=subtotal,
                )
            )
            apply_stock_delta(product, -line.quantity, reason="bill")
            total += subtotal

        bill.total_cents = total
        db.session.commit()
        return bill

    bill = run_with_retry(_op)
    current_app.logger.info(
        "Bill created id=%s items=%s total_cents=%s method=%s",
        bill.id, len(lines), bill.total_cents, bill.payment_method,
    )
    return bill


def get_bill(bill_id: int) -> Bill:
    """
    Raises:
        BillNotFoundError: If bill not found
    """
    bill = db.session.get(Bill, bill_id)
    if bill is None:
        raise BillNotFoundError("Bill not found")
    return bill


def list_bills(limit: int = 50) -> list[Bill]:
    """Most recent bills first."""
    return db.session.query(Bill).order_by(Bill.id.desc()).limit(limit).all()


# =============================================================================
# REPORTING
# =============================================================================


def period_start(period: str, *, now: datetime | None = None) -> datetime:
    """
    Start of a reporting window: midnight UTC, N days back.

    Unknown periods fall back to "today".
    """
    now = now or utcnow()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=PERIOD_DAYS.get(period, 0))


def _day_expr(column):
    if db.engine.dialect.name == "sqlite":
        return func.strftime("%Y-%m-%d", column)
    return func.to_char(column, "YYYY-MM-DD")


def _average_cents(total_cents: int, count: int) -> int:
    if not count:
        return 0
    return int((Decimal(total_cents) / count).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def sales_analytics(period: str = "today") -> dict:
    """Count, total, average, smallest and largest bill since the period start."""
    start = period_start(period)
    count, total, smallest, largest = db.session.query(
        func.count(Bill.id),
        func.coalesce(func.sum(Bill.total_cents), 0),
        func.min(Bill.total_cents),
        func.max(Bill.total_cents),
    ).filter(Bill.created_at >= start).one()

    count = int(count or 0)
    total = int(total or 0)
    return {
        "period": period,
        "from": to_utc_z(start),
        "total_transactions": count,
        "total_sales": from_cents(total),
        "avg_transaction_value": from_cents(_average_cents(total, count)),
        "min_transaction": from_cents(int(smallest or 0)),
        "max_transaction": from_cents(int(largest or 0)),
    }


def daily_sales(days: int = 30) -> list[dict]:
    """Bill count and takings per UTC day, newest day first."""
    if days <= 0 or days > MAX_REPORT_DAYS:
        raise ValidationError(f"days must be between 1 and {MAX_REPORT_DAYS}")

    start = (utcnow() - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    day = _day_expr(Bill.created_at)

    rows = (
        db.session.query(
            day.label("day"),
            func.count(Bill.id).label("transactions"),
            func.coalesce(func.sum(Bill.total_cents), 0).label("sales_cents"),
        )
        .filter(Bill.created_at >= start)
        .group_by("day")
        .order_by(desc("day"))
        .all()
    )
    return [
        {
            "date": row.day,
            "transactions": int(row.transactions or 0),
            "sales": from_cents(int(row.sales_cents or 0)),
        }
        for row in rows
    ]


def top_products(period: str = "month", limit: int = 10) -> list[dict]:
    """Best sellers by revenue since the period start."""
    if limit <= 0 or limit > MAX_TOP_PRODUCTS:
        raise ValidationError(f"limit must be between 1 and {MAX_TOP_PRODUCTS}")

    start = period_start(period)
    revenue = func.sum(BillItem.subtotal_cents)

    rows = (
        db.session.query(
            Product.id.label("product_id"),
            Product.name,
            Product.barcode,
            func.sum(BillItem.quantity).label("total_quantity"),
            revenue.label("revenue_cents"),
        )
        .join(BillItem, BillItem.product_id == Product.id)
        .join(Bill, Bill.id == BillItem.bill_id)
        .filter(Bill.created_at >= start)
        .group_by(Product.id, Product.name, Product.barcode)
        .order_by(revenue.desc(), Product.name.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "product_id": row.product_id,
            "name": row.name,
            "barcode": row.barcode,
            "total_quantity": int(row.total_quantity or 0),
            "total_revenue": from_cents(int(row.revenue_cents or 0)),
        }
        for row in rows
    ]
