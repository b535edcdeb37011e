"""Blueprint registration helper."""

from __future__ import annotations

from flask import Flask, jsonify

from .analysis import bp as analysis_bp
from .analytics import bp as analytics_bp
from .coupons import bp as coupons_bp
from .payments import bp as payments_bp


def register_routes(app: Flask) -> None:
    """Register all application blueprints on the provided Flask app."""
    app.register_blueprint(analysis_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(coupons_bp)
    app.register_blueprint(analytics_bp)

    @app.get("/api/health")
    def health():
        return jsonify(status="ok"), 200
