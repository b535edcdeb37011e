"""Service layer modules for the Career Matcher API."""

from . import (
    analytics_service,
    coupon_service,
    cv_workflow,
    openai_service,
    payment_service,
    pdf_service,
    report_composer,
    text_extraction_service,
)

__all__ = [
    "analytics_service",
    "coupon_service",
    "cv_workflow",
    "openai_service",
    "payment_service",
    "pdf_service",
    "report_composer",
    "text_extraction_service",
]
