"""Flask application setup and blueprint wiring."""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from career_matcher.config import Settings
from career_matcher.container import ServiceContainer, build_services, init_services
from career_matcher.errors import ApiError
from career_matcher.routes import register_routes
from career_matcher.storage import ensure_directory

UPLOAD_LIMIT_BYTES = 10 * 1024 * 1024  # 10 MB per request


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> Flask:
    """Configure and return the Flask application instance.

    ``services`` lets callers inject prebuilt (or fake) collaborators; when it
    is omitted the real OpenAI, Stripe and Chromium clients are built from
    ``settings``, which fails fast on missing configuration.
    """
    settings = settings or Settings.from_env()
    if services is None:
        services = build_services(settings)

    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": settings.frontend_url}}, supports_credentials=True)

    app.config.update(
        MAX_CONTENT_LENGTH=UPLOAD_LIMIT_BYTES,
        UPLOAD_FOLDER=str(ensure_directory(settings.upload_folder)),
        FRONTEND_URL=settings.frontend_url,
        STRIPE_PUBLISHABLE_KEY=settings.stripe_publishable_key,
        VALID_COUPON_CODES=settings.valid_coupon_codes,
        PAYMENT_MODE=settings.payment_mode,
    )
    app.logger.setLevel(settings.log_level)

    init_services(app, services)
    register_error_handlers(app)
    register_routes(app)

    app.logger.info("Career Matcher API ready (payment mode: %s)", settings.payment_mode)
    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        if error.status_code >= 500:
            app.logger.error("Request failed: %s", error.message)
        return jsonify(error=error.message), error.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(_error):
        return jsonify(error="File too large. Maximum size is 10MB."), 413

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify(error=error.description), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        app.logger.exception("Unhandled error: %s", error)
        return jsonify(error="Internal server error"), 500
