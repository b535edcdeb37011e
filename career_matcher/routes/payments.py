"""/api payment endpoints backed by Stripe Checkout."""

from __future__ import annotations

import stripe
from flask import Blueprint, current_app, jsonify, request

from career_matcher.container import get_services
from career_matcher.errors import BadRequestError

bp = Blueprint("payments", __name__, url_prefix="/api")

SUCCESS_PATH = "/payment-success?session_id={CHECKOUT_SESSION_ID}"
CANCEL_PATH = "/payment-cancel"


def _field(obj, key):
    # StripeObject supports `in` and indexing but not dict methods.
    return obj[key] if obj is not None and key in obj else None


def _metadata_dict(metadata) -> dict:
    if metadata is None:
        return {}
    if isinstance(metadata, stripe.StripeObject):
        return metadata.to_dict()
    return dict(metadata)


@bp.post("/create-checkout-session")
def create_checkout_session():
    payload = request.get_json(silent=True) or {}
    service_option = payload.get("serviceOption")
    customer_email = payload.get("customerEmail")

    if not service_option:
        raise BadRequestError("Service option is required")
    if not customer_email:
        raise BadRequestError("Customer email is required")

    embedded = payload.get("embedded", True)
    if not isinstance(embedded, bool):
        raise BadRequestError("embedded must be a boolean")
    metadata = payload.get("metadata")
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise BadRequestError("metadata must be an object")

    frontend_url = current_app.config["FRONTEND_URL"]
    payments = get_services().payments
    session = payments.create_checkout_session(
        service_option=service_option,
        customer_email=customer_email,
        success_url=f"{frontend_url}{SUCCESS_PATH}",
        cancel_url=f"{frontend_url}{CANCEL_PATH}",
        return_url=f"{frontend_url}{SUCCESS_PATH}",
        embedded=embedded,
        metadata=metadata,
    )

    client_secret = getattr(session, "client_secret", None)
    current_app.logger.info(
        "Checkout session created: %s (client secret: %s)", session.id, bool(client_secret)
    )

    return (
        jsonify(
            sessionId=session.id,
            url=getattr(session, "url", None),
            clientSecret=client_secret,
            paymentMode=payments.payment_mode,
            publishableKey=current_app.config.get("STRIPE_PUBLISHABLE_KEY"),
        ),
        200,
    )


@bp.post("/verify-session")
def verify_session():
    """Confirm payment for a checkout session; test mode always counts as paid."""
    payload = request.get_json(silent=True) or {}
    session_id = payload.get("sessionId")
    if not session_id:
        raise BadRequestError("Session ID is required")

    payments = get_services().payments
    session = payments.get_checkout_session(session_id)
    is_paid = getattr(session, "payment_status", None) == "paid"

    if not payments.is_test_mode() and not is_paid:
        return jsonify(error="Payment not completed", paid=False), 400

    return (
        jsonify(
            paid=True,
            sessionId=session.id,
            paymentMode=payments.payment_mode,
            metadata=_metadata_dict(getattr(session, "metadata", None)),
        ),
        200,
    )


@bp.post("/webhook")
def webhook():
    event = get_services().payments.verify_webhook(
        request.get_data(), request.headers.get("Stripe-Signature")
    )
    handle_event(event)
    return jsonify(received=True), 200


def handle_event(event) -> str:
    """Log a verified Stripe event and return the name of the branch taken."""
    event_type = event["type"]
    logger = current_app.logger

    if event_type == "checkout.session.completed":
        session = event["data"]["object"]
        metadata = _metadata_dict(_field(session, "metadata"))
        logger.info(
            "Checkout session completed: %s (payment status %s, service %s, mode %s)",
            _field(session, "id"),
            _field(session, "payment_status"),
            metadata.get("serviceOption"),
            metadata.get("paymentMode"),
        )
        return "checkout_completed"
    if event_type == "payment_intent.succeeded":
        logger.info("PaymentIntent was successful")
        return "payment_succeeded"
    if event_type == "payment_intent.payment_failed":
        logger.warning("PaymentIntent failed")
        return "payment_failed"

    logger.info("Unhandled event type %s", event_type)
    return "unhandled"
