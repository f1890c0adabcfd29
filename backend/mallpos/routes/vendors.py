# Overview: Flask API routes for vendor operations; parses input and returns JSON responses.

"""
Vendor Routes

Vendor directory plus the vendor ledger: payments and derived balance.
"""

from flask import Blueprint, request, jsonify

from ..models import Vendor
from ..money import to_positive_cents
from ..services import vendor_service, vendor_payment_service, balance_service
from ..services.vendor_service import VendorNotFoundError, VendorValidationError
from ..services.vendor_payment_service import PaymentNotFoundError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_vendor,
    json_object,
    ValidationError,
    ConflictError,
)

VENDOR_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "contact_name", "phone", "email", "address",
        "gst_number", "payment_terms_days", "notes",
    },
    required_on_create={"name"},
)

vendors_bp = Blueprint("vendors", __name__, url_prefix="/api/vendors")


@vendors_bp.get("")
def list_vendors_route():
    """
    List vendors ordered by name.

    Query parameters:
    - search: match on name, phone or email
    """
    vendors = vendor_service.list_vendors(search=request.args.get("search"))
    return jsonify([v.to_dict() for v in vendors])


@vendors_bp.get("/with-products")
def list_vendors_with_products_route():
    """Only vendors directly assigned to at least one product."""
    vendors = vendor_service.list_vendors_with_products()
    return jsonify([{"id": v.id, "name": v.name} for v in vendors])


@vendors_bp.post("")
def create_vendor_route():
    """
    Create a new vendor.

    Request body:
    {
        "name": "Vendor Name",      // required
        "contact_name": "...",      // optional
        "phone": "...",             // optional
        "email": "...",             // optional
        "address": "...",           // optional
        "gst_number": "...",        // optional
        "payment_terms_days": 30,   // optional
        "notes": "..."              // optional
    }
    """
    try:
        data = json_object(request.get_json(silent=True))
        if not data.get("name"):
            raise ValidationError("Vendor name required")
        patch = validate_payload(model=Vendor, payload=data, policy=VENDOR_POLICY, partial=False)
        enforce_rules_vendor(patch)
        vendor = vendor_service.create_vendor(patch=patch)
    except (ValidationError, VendorValidationError) as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(vendor.to_dict()), 201


@vendors_bp.get("/payments")
def list_all_payments_route():
    """Every vendor payment, most recent first, with the vendor's name."""
    payments = vendor_payment_service.list_all_payments()
    return jsonify([p.to_dict(include_vendor_name=True) for p in payments])


@vendors_bp.delete("/payments/<int:payment_id>")
def delete_payment_route(payment_id: int):
    try:
        vendor_payment_service.delete_payment(payment_id)
    except PaymentNotFoundError:
        return jsonify({"error": "Payment not found"}), 404
    return "", 204


@vendors_bp.get("/<int:vendor_id>")
def get_vendor_route(vendor_id: int):
    try:
        vendor = vendor_service.get_vendor(vendor_id)
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    return jsonify(vendor.to_dict())


@vendors_bp.put("/<int:vendor_id>")
def update_vendor_route(vendor_id: int):
    """Update a vendor; all fields optional."""
    try:
        data = json_object(request.get_json(silent=True))
        patch = validate_payload(model=Vendor, payload=data, policy=VENDOR_POLICY, partial=True)
        enforce_rules_vendor(patch)
        vendor = vendor_service.update_vendor(vendor_id, patch=patch)
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    except (ValidationError, VendorValidationError) as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(vendor.to_dict())


@vendors_bp.delete("/<int:vendor_id>")
def delete_vendor_route(vendor_id: int):
    """
    Delete a vendor (and its payments).

    Rejected while the vendor has purchase history or assigned products.
    """
    try:
        vendor_service.delete_vendor(vendor_id)
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return "", 204


@vendors_bp.get("/<int:vendor_id>/balance")
def get_vendor_balance_route(vendor_id: int):
    """
    Outstanding balance derived from full purchase and payment history.

    Returns:
        {totalPurchases, totalPayments, outstandingBalance, status}
    """
    try:
        balance = balance_service.get_vendor_balance(vendor_id)
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    return jsonify(balance.to_dict())


@vendors_bp.get("/<int:vendor_id>/payments")
def list_vendor_payments_route(vendor_id: int):
    try:
        vendor_service.get_vendor(vendor_id)
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404

    payments = vendor_payment_service.list_payments(vendor_id)
    return jsonify([p.to_dict() for p in payments])


@vendors_bp.post("/<int:vendor_id>/payments")
def create_vendor_payment_route(vendor_id: int):
    """
    Record a payment to a vendor.

    Request body:
    {
        "amount": 150.00,                 // required, > 0
        "payment_mode": "upi",            // cash, upi, bank_transfer, cheque, card, other
        "reference_number": "...",        // optional
        "transaction_id": "...",          // optional
        "notes": "...",                   // optional
        "payment_date": "2026-01-31"      // optional, defaults to now
    }
    """
    try:
        data = json_object(request.get_json(silent=True))
        amount_cents = to_positive_cents(data.get("amount"), "amount")
        payment = vendor_payment_service.create_payment(
            vendor_id=vendor_id,
            amount_cents=amount_cents,
            payment_mode=data.get("payment_mode"),
            reference_number=data.get("reference_number"),
            transaction_id=data.get("transaction_id"),
            notes=data.get("notes"),
            payment_date=data.get("payment_date"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404

    return jsonify(payment.to_dict()), 201
