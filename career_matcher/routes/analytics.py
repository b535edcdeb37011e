"""/api/analytics endpoint: funnel events become structured log lines."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from career_matcher.services.analytics_service import log_funnel_event

bp = Blueprint("analytics", __name__, url_prefix="/api")


@bp.post("/analytics")
def track_event():
    payload = request.get_json(silent=True)
    log_funnel_event(payload if isinstance(payload, dict) else {})
    return jsonify(success=True), 200
