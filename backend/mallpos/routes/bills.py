# Overview: Flask API routes for counter sales (bills) and sales reports; parses input and returns JSON responses.

"""
Bill Routes

POST /api/bills records a sale and takes its items out of stock; the GET
endpoints list bills and report on takings and best sellers.
"""

from flask import Blueprint, request, jsonify

from ..money import to_non_negative_cents
from ..services import billing_service
from ..services.billing_service import BillLine, BillNotFoundError
from ..services.products_service import ProductNotFoundError
from ..validation import ValidationError, coerce_int, json_object, require_positive_int


bills_bp = Blueprint("bills", __name__, url_prefix="/api/bills")


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    return coerce_int(raw, name)


def _bill_lines(raw_items) -> list[BillLine]:
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("No items to bill")

    lines = []
    for index, item in enumerate(raw_items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")
        # The till posts camelCase; snake_case is accepted too
        product_id = item.get("productId", item.get("product_id"))
        price = item.get("price")
        lines.append(
            BillLine(
                product_id=require_positive_int(product_id, "productId"),
                quantity=require_positive_int(item.get("quantity"), "quantity"),
                unit_price_cents=None if price in (None, "") else to_non_negative_cents(price, "price"),
            )
        )
    return lines


@bills_bp.get("")
def list_bills_route():
    """The 50 most recent bills."""
    return jsonify([b.to_dict() for b in billing_service.list_bills()])


@bills_bp.post("")
def create_bill_route():
    """
    Record a sale.

    Request body:
    {
        "items": [                          // required, non-empty
            {"productId": 1, "quantity": 2, "price": 20.0}  // price optional, defaults to catalog
        ],
        "paymentMethod": "cash",            // cash, card, upi
        "customerName": "...",              // optional
        "customerPhone": "..."              // optional
    }

    Returns:
        201 Bill with items
    """
    try:
        data = json_object(request.get_json(silent=True))
        bill = billing_service.create_bill(
            lines=_bill_lines(data.get("items")),
            payment_method=data.get("paymentMethod", data.get("payment_method")),
            customer_name=data.get("customerName", data.get("customer_name")),
            customer_phone=data.get("customerPhone", data.get("customer_phone")),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify(bill.to_dict(include_items=True)), 201


@bills_bp.get("/<int:bill_id>")
def get_bill_route(bill_id: int):
    try:
        bill = billing_service.get_bill(bill_id)
    except BillNotFoundError:
        return jsonify({"error": "Bill not found"}), 404
    return jsonify(bill.to_dict(include_items=True))


@bills_bp.get("/analytics")
def sales_analytics_route():
    """
    Query params:
    - period: today (default), week, month, year
    """
    period = request.args.get("period", "today")
    return jsonify(billing_service.sales_analytics(period))


@bills_bp.get("/daily-sales")
def daily_sales_route():
    """
    Query params:
    - days: int (default 30)
    """
    try:
        days = _int_arg("days", 30)
        rows = billing_service.daily_sales(days)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(rows)


@bills_bp.get("/top-products")
def top_products_route():
    """
    Query params:
    - period: week, month (default), year
    - limit: int (default 10)
    """
    period = request.args.get("period", "month")
    try:
        limit = _int_arg("limit", 10)
        rows = billing_service.top_products(period, limit)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(rows)
