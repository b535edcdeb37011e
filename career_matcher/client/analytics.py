"""Funnel tracking: one event per step of the purchase journey."""

from __future__ import annotations

import json
import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from career_matcher.client.api import ApiClientError, CVAnalysisApi
from career_matcher.client.state import CVFile

_LOGGER = logging.getLogger(__name__)


def new_session_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class FunnelTracker:
    def __init__(self, api: CVAnalysisApi, session_id: Optional[str] = None) -> None:
        self.api = api
        self.session_id = session_id or new_session_id()

    def track(self, event_name: str, **data: Any) -> Dict[str, Any]:
        """Send one event; delivery failures are logged and never raised."""
        event = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event_name,
            **data,
            "sessionId": self.session_id,
        }
        try:
            self.api.track_event(event)
        except ApiClientError as exc:
            _LOGGER.error("Analytics error: %s", exc.message)
            _LOGGER.info(json.dumps({"type": "analytics", **event}, default=str))
        return event

    def track_page_view(self) -> Dict[str, Any]:
        return self.track("page_view", step="landing", funnel_step=1)

    def track_step1_success(self, cv_file: Optional[CVFile], role: str, job_description: str = "") -> Dict[str, Any]:
        return self.track(
            "step_1_success",
            step="form_complete",
            funnel_step=2,
            hasFile=cv_file is not None,
            hasRole=bool(role),
            hasJobDescription=bool(job_description),
            fileSize=cv_file.size if cv_file else 0,
            fileName=cv_file.name if cv_file else None,
            fileType=cv_file.content_type if cv_file else None,
        )

    def track_step2_start(self, selected_option: Optional[str] = None) -> Dict[str, Any]:
        return self.track("step_2_start", step="pricing_view", funnel_step=3, selectedPlan=selected_option)

    def track_payment_initiated(
        self, selected_option: str, customer_email: str, terms_accepted: bool, price: Optional[float] = None
    ) -> Dict[str, Any]:
        return self.track(
            "payment_initiated",
            step="payment_start",
            funnel_step=4,
            selectedPlan=selected_option,
            customerEmail=customer_email,
            termsAccepted=terms_accepted,
            price=price,
        )

    def track_payment_completed(
        self, checkout_session_id: str, service_option: Optional[str], amount: Optional[float] = None
    ) -> Dict[str, Any]:
        return self.track(
            "payment_completed",
            step="payment_complete",
            funnel_step=5,
            checkoutSessionId=checkout_session_id,
            selectedPlan=service_option,
            amount=amount,
        )

    def track_download_completed(self, service_option: str, file_name: str, file_type: str) -> Dict[str, Any]:
        return self.track(
            "download_completed",
            step="file_download",
            funnel_step=6,
            serviceOption=service_option,
            fileName=file_name,
            fileType=file_type,
        )

    def track_coupon_used(self, coupon_code: str) -> Dict[str, Any]:
        return self.track("coupon_used", couponCode=coupon_code)
