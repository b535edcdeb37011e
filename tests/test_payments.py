"""Tests for checkout sessions, session verification and the Stripe webhook."""

from __future__ import annotations

import hashlib
import hmac
import json
import time

import pytest
import stripe

from career_matcher.errors import BadRequestError, ConfigurationError, WebhookSignatureError
from career_matcher.services.payment_service import PaymentService

WEBHOOK_SECRET = "whsec_test_secret"


def sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    timestamp = timestamp or int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"), f"{timestamp}.{payload}".encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_event(event_type="checkout.session.completed") -> str:
    return json.dumps(
        {
            "id": "evt_test_1",
            "object": "event",
            "type": event_type,
            "data": {
                "object": {
                    "id": "cs_test_123",
                    "object": "checkout.session",
                    "payment_status": "paid",
                    "metadata": {"serviceOption": "complete", "paymentMode": "test"},
                }
            },
        }
    )


@pytest.fixture
def payments(stripe_client):
    return PaymentService(
        stripe_client,
        prices={"analysis": 3.90, "improved": 6.90, "complete": 9.90},
        webhook_secret=WEBHOOK_SECRET,
    )


@pytest.mark.parametrize(
    ("option", "cents"), [("analysis", 390), ("improved", 690), ("complete", 990)]
)
def test_price_lookup_is_deterministic(payments, option, cents):
    assert payments.get_price_in_cents(option) == cents
    assert payments.get_price_in_cents(option) == cents


def test_embedded_session_params(payments):
    params = payments.build_session_params(
        service_option="complete",
        customer_email="ada@example.com",
        success_url="https://app.test/ok",
        cancel_url="https://app.test/cancel",
        return_url="https://app.test/return",
        embedded=True,
        metadata={"coupon": None, "attempt": 2},
    )

    line_item = params["line_items"][0]
    assert line_item["price_data"]["unit_amount"] == 990
    assert line_item["price_data"]["product_data"]["name"] == "Complete CV Package"
    assert params["ui_mode"] == "embedded"
    assert params["return_url"] == "https://app.test/return"
    assert "success_url" not in params
    assert params["metadata"] == {
        "serviceOption": "complete",
        "paymentMode": "test",
        "coupon": "None",
        "attempt": "2",
    }
    assert params["payment_method_options"]["card"]["request_three_d_secure"] == "automatic"


def test_hosted_session_params_in_live_mode(stripe_client):
    payments = PaymentService(stripe_client, prices={"analysis": 5}, payment_mode="live")

    params = payments.build_session_params(
        service_option="analysis",
        customer_email="ada@example.com",
        success_url="https://app.test/ok",
        cancel_url="https://app.test/cancel",
    )

    assert params["success_url"] == "https://app.test/ok"
    assert params["cancel_url"] == "https://app.test/cancel"
    assert "ui_mode" not in params
    assert "payment_method_options" not in params


def test_unknown_option_fails_before_stripe_is_called(payments, stripe_client):
    with pytest.raises(BadRequestError):
        payments.create_checkout_session(
            service_option="platinum",
            customer_email="ada@example.com",
            success_url="s",
            cancel_url="c",
        )

    assert stripe_client.sessions.created == []


def test_verify_webhook_accepts_valid_signature(payments):
    payload = checkout_event()

    event = payments.verify_webhook(payload.encode("utf-8"), sign(payload))

    assert event["type"] == "checkout.session.completed"


def test_verify_webhook_rejects_tampered_payload(payments):
    payload = checkout_event()
    header = sign(payload)

    with pytest.raises(WebhookSignatureError) as excinfo:
        payments.verify_webhook(payload.replace("paid", "unpaid").encode("utf-8"), header)

    assert excinfo.value.status_code == 400
    assert excinfo.value.message.startswith("Webhook signature verification failed")


def test_verify_webhook_requires_secret(stripe_client):
    payments = PaymentService(stripe_client, prices={})

    with pytest.raises(ConfigurationError):
        payments.verify_webhook(b"{}", "t=1,v1=abc")


# HTTP surface


def test_create_checkout_session_route(client, stripe_client):
    response = client.post(
        "/api/create-checkout-session",
        json={"serviceOption": "improved", "customerEmail": "ada@example.com", "metadata": {"source": "pricing"}},
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body == {
        "sessionId": "cs_test_123",
        "url": "https://checkout.stripe.test/c/cs_test_123",
        "clientSecret": "cs_test_123_secret",
        "paymentMode": "test",
        "publishableKey": "pk_test_dummy",
    }
    params = stripe_client.sessions.created[0]
    assert params["ui_mode"] == "embedded"
    assert params["return_url"] == "http://localhost:3000/payment-success?session_id={CHECKOUT_SESSION_ID}"
    assert params["metadata"]["source"] == "pricing"
    assert params["line_items"][0]["price_data"]["unit_amount"] == 690


def test_create_checkout_session_redirect_mode(client, stripe_client):
    response = client.post(
        "/api/create-checkout-session",
        json={"serviceOption": "analysis", "customerEmail": "ada@example.com", "embedded": False},
    )

    assert response.status_code == 200
    params = stripe_client.sessions.created[0]
    assert params["cancel_url"] == "http://localhost:3000/payment-cancel"


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"customerEmail": "ada@example.com"}, "Service option is required"),
        ({"serviceOption": "analysis"}, "Customer email is required"),
        ({"serviceOption": "gold", "customerEmail": "ada@example.com"}, "Invalid service option"),
    ],
)
def test_create_checkout_session_validation(client, stripe_client, payload, message):
    response = client.post("/api/create-checkout-session", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == message
    assert stripe_client.sessions.created == []


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"embedded": "false"}, "embedded must be a boolean"),
        ({"metadata": "pricing"}, "metadata must be an object"),
        ({"metadata": ["pricing"]}, "metadata must be an object"),
    ],
)
def test_create_checkout_session_rejects_malformed_options(client, stripe_client, payload, message):
    body = {"serviceOption": "analysis", "customerEmail": "ada@example.com", **payload}

    response = client.post("/api/create-checkout-session", json=body)

    assert response.status_code == 400
    assert response.get_json()["error"] == message
    assert stripe_client.sessions.created == []


def test_metadata_is_read_from_stripe_objects():
    from career_matcher.routes.payments import _metadata_dict

    session = stripe.checkout.Session.construct_from(
        {"id": "cs_1", "object": "checkout.session", "metadata": {"serviceOption": "analysis"}},
        "sk_test_dummy",
    )

    assert _metadata_dict(session.metadata) == {"serviceOption": "analysis"}
    assert _metadata_dict(None) == {}


def test_completed_event_from_stripe_is_handled(app, stripe_client):
    from career_matcher.routes.payments import handle_event

    payload = checkout_event()
    event = stripe_client.construct_event(payload, sign(payload), WEBHOOK_SECRET)

    with app.app_context():
        assert handle_event(event) == "checkout_completed"


def test_verify_session_bypasses_payment_in_test_mode(client, stripe_client):
    response = client.post("/api/verify-session", json={"sessionId": "cs_test_123"})

    assert response.status_code == 200
    assert response.get_json() == {
        "paid": True,
        "sessionId": "cs_test_123",
        "paymentMode": "test",
        "metadata": {"serviceOption": "analysis", "paymentMode": "test"},
    }


def test_verify_session_requires_payment_in_live_mode(client, services, stripe_client):
    services.payments.payment_mode = "live"

    unpaid = client.post("/api/verify-session", json={"sessionId": "cs_live_1"})
    assert unpaid.status_code == 400
    assert unpaid.get_json() == {"error": "Payment not completed", "paid": False}

    stripe_client.sessions.payment_status = "paid"
    paid = client.post("/api/verify-session", json={"sessionId": "cs_live_1"})
    assert paid.status_code == 200
    assert paid.get_json()["paid"] is True


def test_verify_session_requires_session_id(client):
    response = client.post("/api/verify-session", json={})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Session ID is required"


def test_webhook_acknowledges_signed_event(client, monkeypatch):
    from career_matcher.routes import payments as payment_routes

    handled = []
    original = payment_routes.handle_event
    monkeypatch.setattr(payment_routes, "handle_event", lambda event: handled.append(original(event)))
    payload = checkout_event()

    response = client.post(
        "/api/webhook",
        data=payload,
        headers={"Stripe-Signature": sign(payload)},
        content_type="application/json",
    )

    assert response.status_code == 200
    assert response.get_json() == {"received": True}
    assert handled == ["checkout_completed"]


@pytest.mark.parametrize(
    ("event_type", "branch"),
    [
        ("payment_intent.succeeded", "payment_succeeded"),
        ("payment_intent.payment_failed", "payment_failed"),
        ("customer.created", "unhandled"),
    ],
)
def test_webhook_dispatch_branches(app, event_type, branch):
    from career_matcher.routes.payments import handle_event

    event = json.loads(checkout_event(event_type))
    with app.app_context():
        assert handle_event(event) == branch


@pytest.mark.parametrize("header", [None, "t=1,v1=deadbeef", "garbage"])
def test_webhook_rejects_bad_signature_without_dispatch(client, monkeypatch, header):
    from career_matcher.routes import payments as payment_routes

    handled = []
    monkeypatch.setattr(payment_routes, "handle_event", handled.append)
    headers = {"Stripe-Signature": header} if header else {}

    response = client.post(
        "/api/webhook", data=checkout_event(), headers=headers, content_type="application/json"
    )

    assert response.status_code == 400
    assert "Webhook signature verification failed" in response.get_json()["error"]
    assert handled == []
