# Overview: Flask API routes for products and stock; parses input and returns JSON responses.

# backend/mallpos/routes/products.py
"""
Product management routes.

Prices travel as decimals ("price", "wholesale_price") and are stored in
cents; gst_rate travels as a percent and is stored in basis points. Stock
is an integer counter; a PUT that carries "stock" overwrites it under the
same row lock as POST /stock.
"""
from flask import Blueprint, request, jsonify

from ..models import Product
from ..money import from_cents, to_cents, to_non_negative_cents
from ..services import products_service
from ..services.products_service import ProductNotFoundError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    coerce_int,
    json_object,
    ValidationError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "barcode", "price_cents", "wholesale_price_cents", "stock", "vendor_id",
        "gst_rate_bps", "is_gst_exempt",
    },
    required_on_create={"name", "price_cents"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _product_patch(payload: dict, *, partial: bool) -> dict:
    """Map wire decimals to cent columns, then validate against the model."""
    data = dict(payload)
    for wire_key, column in (("price", "price_cents"), ("wholesale_price", "wholesale_price_cents")):
        if wire_key in data:
            raw = data.pop(wire_key)
            data[column] = None if raw is None else to_non_negative_cents(raw, wire_key)
        else:
            data.pop(column, None)
    if "gst_rate" in data:
        raw = data.pop("gst_rate")
        data["gst_rate_bps"] = None if raw is None else to_cents(raw, "gst_rate")
    else:
        data.pop("gst_rate_bps", None)

    patch = validate_payload(model=Product, payload=data, policy=PRODUCT_POLICY, partial=partial)
    enforce_rules_product(patch)
    return patch


@products_bp.get("")
def list_products_route():
    """All products, newest first."""
    return jsonify([p.to_dict() for p in products_service.list_products()])


@products_bp.get("/low-stock")
def list_low_stock_route():
    """
    Query params:
    - threshold: int (optional) - defaults to LOW_STOCK_THRESHOLD
    """
    raw = request.args.get("threshold")
    try:
        threshold = coerce_int(raw, "threshold") if raw not in (None, "") else None
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify([p.to_dict() for p in products_service.list_low_stock(threshold)])


@products_bp.get("/scan/<code>")
def scan_product_route(code: str):
    """
    Look up a scanned code.

    Variable-weight EAN-13 codes resolve to their item code and carry the
    embedded price in the response.
    """
    try:
        product, override_price_cents = products_service.scan_product(code)
    except ProductNotFoundError:
        return jsonify({"error": "Product not found"}), 404

    payload = product.to_dict()
    if override_price_cents is not None:
        payload["price"] = from_cents(override_price_cents)
    return jsonify(payload)


@products_bp.post("")
def create_product_route():
    """
    Create a new product.

    Request body:
    {
        "name": "Chips Pack",      // required
        "price": 1.75,             // required
        "barcode": "CHIPS99",      // optional, unique
        "wholesale_price": 1.2,    // optional
        "stock": 30,               // optional
        "gst_rate": 5,             // optional percent, default 18
        "is_gst_exempt": false,    // optional
        "vendor_id": 1             // optional
    }
    """
    try:
        payload = json_object(request.get_json(silent=True))
        if not payload.get("name") or payload.get("price") is None:
            raise ValidationError("name and price are required")
        patch = _product_patch(payload, partial=False)
        created = products_service.create_product(patch=patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(created.to_dict()), 201


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = products_service.get_product(product_id)
    except ProductNotFoundError:
        return jsonify({"error": "Product not found"}), 404
    return jsonify(product.to_dict())


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    try:
        payload = json_object(request.get_json(silent=True))
        patch = _product_patch(payload, partial=True)
        updated = products_service.update_product(product_id, patch=patch)
    except ProductNotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(updated.to_dict())


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(product_id)
    except ProductNotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"ok": True})


@products_bp.post("/<int:product_id>/stock")
def update_stock_route(product_id: int):
    """
    Adjust or overwrite stock.

    Request body: {"delta": 5} to increment/decrement, or {"stock": 12} to set.
    """
    try:
        data = json_object(request.get_json(silent=True))
        if data.get("delta") is not None:
            product = products_service.adjust_stock(product_id, coerce_int(data["delta"], "delta"))
        elif data.get("stock") is not None:
            product = products_service.set_stock(product_id, coerce_int(data["stock"], "stock"))
        else:
            return jsonify({"error": "delta or stock is required"}), 400
    except ProductNotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(product.to_dict())
