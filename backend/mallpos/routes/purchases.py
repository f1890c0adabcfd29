# Overview: Flask API routes for vendor purchases; parses input and returns JSON responses.

"""
Purchase Routes

POST /api/vendors-purchases and POST /api/purchases both record a delivery
(the first is the path the purchase entry screen posts to).
"""

from flask import Blueprint, request, jsonify

from ..money import to_positive_cents
from ..services import purchase_service
from ..services.products_service import ProductNotFoundError
from ..services.purchase_service import PurchaseNotFoundError
from ..services.vendor_service import VendorNotFoundError
from ..time_utils import normalize_datetime
from ..validation import ValidationError, require_positive_int, coerce_int, json_object


purchases_bp = Blueprint("purchases", __name__, url_prefix="/api")


def _optional_int_arg(name: str) -> int | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return coerce_int(raw, name)


@purchases_bp.post("/vendors-purchases")
@purchases_bp.post("/purchases")
def create_purchase_route():
    """
    Record a purchase (one delivery) and add its quantity to stock.

    Request body:
    {
        "vendor_id": 1,      // required
        "product_id": 2,     // required
        "quantity": 3,       // required, > 0
        "price": 10.00,      // required, unit price, > 0
        "purchased_at": "..." // optional ISO-8601, defaults to now
    }

    Returns:
        201 Purchase
    """
    try:
        data = json_object(request.get_json(silent=True))
        missing = [f for f in ("vendor_id", "product_id", "quantity", "price") if data.get(f) in (None, "")]
        if missing:
            raise ValidationError(f"All fields required: {', '.join(missing)}")

        vendor_id = require_positive_int(data.get("vendor_id"), "vendor_id")
        product_id = require_positive_int(data.get("product_id"), "product_id")
        quantity = require_positive_int(data.get("quantity"), "quantity")
        unit_price_cents = to_positive_cents(data.get("price"), "price")
        purchased_at = None
        if data.get("purchased_at"):
            try:
                purchased_at = normalize_datetime(data.get("purchased_at"))
            except ValueError:
                raise ValidationError("purchased_at must be an ISO-8601 datetime")

        purchase = purchase_service.create_purchase(
            vendor_id=vendor_id,
            product_id=product_id,
            quantity=quantity,
            unit_price_cents=unit_price_cents,
            purchased_at=purchased_at,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    except ProductNotFoundError:
        return jsonify({"error": "Product not found"}), 404

    return jsonify(purchase.to_dict()), 201


@purchases_bp.get("/purchases")
def list_purchases_route():
    """
    List purchases, most recent first, with vendor and product names.

    Query parameters:
    - vendor_id: only this vendor's purchases
    - product_id: only this product's purchases
    """
    try:
        vendor_id = _optional_int_arg("vendor_id")
        product_id = _optional_int_arg("product_id")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    purchases = purchase_service.list_purchases(vendor_id=vendor_id, product_id=product_id)
    return jsonify([p.to_dict(include_names=True) for p in purchases])


@purchases_bp.get("/purchases/getByProductAndVendor")
def get_by_product_and_vendor_route():
    """Latest purchase of a product from a vendor, or null."""
    try:
        product_id = _optional_int_arg("product_id")
        vendor_id = _optional_int_arg("vendor_id")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    if not product_id or not vendor_id:
        return jsonify({"error": "product_id and vendor_id are required"}), 400

    purchase = purchase_service.find_latest_purchase(vendor_id=vendor_id, product_id=product_id)
    return jsonify(purchase.to_dict() if purchase else None)


@purchases_bp.get("/purchases/<int:purchase_id>")
def get_purchase_route(purchase_id: int):
    try:
        purchase = purchase_service.get_purchase(purchase_id)
    except PurchaseNotFoundError:
        return jsonify({"error": "Purchase not found"}), 404
    return jsonify(purchase.to_dict(include_names=True))


@purchases_bp.delete("/purchases/<int:purchase_id>")
def delete_purchase_route(purchase_id: int):
    """
    Delete a purchase and reverse its stock increment.

    Returns:
        204 on success, 404 if the purchase (or its product) does not exist
    """
    try:
        purchase_service.delete_purchase(purchase_id)
    except PurchaseNotFoundError:
        return jsonify({"error": "Purchase not found"}), 404
    except ProductNotFoundError:
        return jsonify({"error": "Product not found"}), 404

    return "", 204
