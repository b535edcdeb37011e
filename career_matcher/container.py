"""Construction of the long-lived service objects shared by all requests."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from career_matcher.config import Settings
from career_matcher.services.cv_workflow import CVWorkflow
from career_matcher.services.openai_service import OpenAIGateway, get_openai_client
from career_matcher.services.payment_service import PaymentService, get_stripe_client
from career_matcher.services.pdf_service import PdfRenderer

EXTENSION_KEY = "career_matcher"


@dataclass
class ServiceContainer:
    workflow: CVWorkflow
    payments: PaymentService


def build_services(settings: Settings) -> ServiceContainer:
    """Validate configuration and connect the external clients once, at startup."""
    settings.validate()

    gateway = OpenAIGateway(get_openai_client(settings.openai_api_key), model=settings.openai_model)
    payments = PaymentService(
        get_stripe_client(settings.stripe_secret_key),
        prices=settings.prices,
        payment_mode=settings.payment_mode,
        webhook_secret=settings.stripe_webhook_secret,
    )
    return ServiceContainer(workflow=CVWorkflow(gateway, PdfRenderer()), payments=payments)


def init_services(app: Flask, services: ServiceContainer) -> None:
    app.extensions[EXTENSION_KEY] = services


def get_services() -> ServiceContainer:
    """Return the services bound to the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]
