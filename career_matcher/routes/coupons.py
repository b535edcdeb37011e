"""/api/validate-coupon endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from career_matcher.services.coupon_service import validate_coupon

bp = Blueprint("coupons", __name__, url_prefix="/api")


@bp.post("/validate-coupon")
def validate_coupon_code():
    payload = request.get_json(silent=True) or {}
    code = payload.get("couponCode")
    if not isinstance(code, str) or not code.strip():
        return jsonify(valid=False, error="Coupon code is required"), 400

    result = validate_coupon(code, current_app.config.get("VALID_COUPON_CODES"))
    if result.valid:
        return jsonify(valid=True, message=result.message), 200
    return jsonify(valid=False, error=result.message), 400
