"""Stripe checkout sessions and webhook verification."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import stripe

from career_matcher.errors import BadRequestError, ConfigurationError, UpstreamError, WebhookSignatureError
from career_matcher.models import ServiceOption

_LOGGER = logging.getLogger(__name__)

SERVICE_NAMES = {
    ServiceOption.ANALYSIS: "CV Analysis Report",
    ServiceOption.IMPROVED: "Improved CV Templates",
    ServiceOption.COMPLETE: "Complete CV Package",
}

SERVICE_DESCRIPTIONS = {
    ServiceOption.ANALYSIS: "Detailed CV analysis report with match score and recommendations",
    ServiceOption.IMPROVED: "2 professionally improved CV templates ready to send",
    ServiceOption.COMPLETE: "Full analysis report + 2 improved CV templates",
}


def get_stripe_client(secret_key: Optional[str]) -> stripe.StripeClient:
    """Instantiate a Stripe client using the configured secret key."""
    if not secret_key:
        raise RuntimeError("STRIPE_SECRET_KEY is not set in environment variables")
    return stripe.StripeClient(secret_key)


class PaymentService:
    def __init__(
        self,
        client: stripe.StripeClient,
        *,
        prices: Mapping[str, float],
        payment_mode: str = "test",
        webhook_secret: str = "",
        currency: str = "usd",
    ) -> None:
        self.client = client
        self.prices = dict(prices)
        self.payment_mode = payment_mode
        self.webhook_secret = webhook_secret
        self.currency = currency

    def is_test_mode(self) -> bool:
        return self.payment_mode == "test"

    @staticmethod
    def _option(service_option: Any) -> ServiceOption:
        option = ServiceOption.parse(service_option)
        if option is None:
            raise BadRequestError("Invalid service option")
        return option

    def get_price(self, service_option: Any) -> float:
        """Price in dollars for a service option."""
        return float(self.prices[self._option(service_option).value])

    def get_price_in_cents(self, service_option: Any) -> int:
        return int(round(self.get_price(service_option) * 100))

    def build_session_params(
        self,
        *,
        service_option: Any,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        return_url: Optional[str] = None,
        embedded: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        option = self._option(service_option)
        params: Dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {
                            "name": SERVICE_NAMES[option],
                            "description": SERVICE_DESCRIPTIONS[option],
                        },
                        "unit_amount": self.get_price_in_cents(option),
                    },
                    "quantity": 1,
                }
            ],
            "mode": "payment",
            "customer_email": customer_email,
            "metadata": {
                "serviceOption": option.value,
                "paymentMode": self.payment_mode,
                **{key: str(value) for key, value in (metadata or {}).items()},
            },
        }

        if embedded:
            params["ui_mode"] = "embedded"
            params["return_url"] = return_url or success_url
        else:
            params["success_url"] = success_url
            params["cancel_url"] = cancel_url

        if self.is_test_mode():
            params["payment_method_options"] = {"card": {"request_three_d_secure": "automatic"}}

        return params

    def create_checkout_session(self, **kwargs: Any):
        params = self.build_session_params(**kwargs)
        try:
            return self.client.checkout.sessions.create(params=params)
        except stripe.StripeError as exc:
            raise UpstreamError(f"Stripe checkout error: {exc.user_message or exc}") from exc

    def get_checkout_session(self, session_id: str):
        try:
            return self.client.checkout.sessions.retrieve(session_id)
        except stripe.StripeError as exc:
            raise UpstreamError(f"Stripe session lookup failed: {exc.user_message or exc}") from exc

    def verify_webhook(self, payload: bytes, signature: Optional[str]):
        """Return the verified Stripe event for a raw webhook body."""
        if not self.webhook_secret:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET is not set")
        try:
            return self.client.construct_event(payload, signature or "", self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise WebhookSignatureError(f"Webhook signature verification failed: {exc}") from exc
