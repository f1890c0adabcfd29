# Overview: Flask API routes for customer history; returns JSON responses.

from flask import Blueprint, jsonify

from ..services import customer_service


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
def customer_history_route():
    """Named customers and daily anonymous walk-ins, with their bills."""
    return jsonify([c.to_dict() for c in customer_service.customer_history()])
