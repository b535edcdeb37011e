"""Client store: one FormState plus the effects that drive the API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from career_matcher.client import state as transitions
from career_matcher.client.analytics import FunnelTracker
from career_matcher.client.api import ApiClientError, CVAnalysisApi, DownloadedFile
from career_matcher.client.persistence import FormPersistence
from career_matcher.client.state import FormState
from career_matcher.models import ServiceOption

_LOGGER = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred. Please try again."


class FileDownloader:
    """Writes downloaded results into a directory."""

    def __init__(self, directory) -> None:
        self.directory = Path(directory)

    def __call__(self, download: DownloadedFile) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / Path(download.filename).name
        target.write_bytes(download.content)
        _LOGGER.info("Saved %s (%d bytes)", target, len(download.content))
        return target


class CVAnalysisStore:
    def __init__(
        self,
        api: CVAnalysisApi,
        downloader: Callable[[DownloadedFile], Any],
        *,
        tracker: Optional[FunnelTracker] = None,
        persistence: Optional[FormPersistence] = None,
        initial_state: Optional[FormState] = None,
    ) -> None:
        self.api = api
        self.downloader = downloader
        self.tracker = tracker
        self.persistence = persistence
        self.state = initial_state or FormState()

    def dispatch(self, transition: Callable[..., FormState], *args: Any) -> FormState:
        """Apply a pure transition from ``career_matcher.client.state``."""
        self.state = transition(self.state, *args)
        return self.state

    def _handle_api_error(self, exc: ApiClientError) -> None:
        self.dispatch(transitions.set_error, exc.server_error or GENERIC_ERROR)
        _LOGGER.error("CV Analysis API Error: %s", exc.message)

    def _run(self, option: ServiceOption, call: Callable[..., DownloadedFile]) -> bool:
        if self.state.is_loading:
            return False
        if not transitions.is_form_valid(self.state):
            self.dispatch(transitions.set_error, transitions.REQUIRED_FIELDS_MESSAGE)
            return False

        self.dispatch(transitions.start_loading)
        try:
            download = call(self.state.cv_file, self.state.role, self.state.job_description)
            self.downloader(download)
        except ApiClientError as exc:
            self._handle_api_error(exc)
            return False
        except Exception:
            _LOGGER.exception("Processing the %s request failed", option.value)
            self.dispatch(transitions.set_error, GENERIC_ERROR)
            return False
        finally:
            self.dispatch(transitions.stop_loading)

        if self.tracker is not None:
            self.tracker.track_download_completed(option.value, download.filename, download.content_type)
        return True

    def analyze_only(self) -> bool:
        return self._run(ServiceOption.ANALYSIS, self.api.analyze_cv_only)

    def improve_only(self) -> bool:
        return self._run(ServiceOption.IMPROVED, self.api.improve_cv_only)

    def analyze_and_improve(self) -> bool:
        return self._run(ServiceOption.COMPLETE, self.api.analyze_and_improve_cv)

    def process_cv(self) -> bool:
        """Run the purchased service once an option is chosen and terms accepted."""
        option = self.state.selected_option
        if option is None:
            self.dispatch(transitions.set_error, "Please select a service option")
            return False
        if not self.state.terms_accepted:
            self.dispatch(transitions.set_error, "Please accept the terms of service")
            return False

        handlers = {
            ServiceOption.ANALYSIS: self.analyze_only,
            ServiceOption.IMPROVED: self.improve_only,
            ServiceOption.COMPLETE: self.analyze_and_improve,
        }
        handler = handlers.get(option)
        if handler is None:
            self.dispatch(transitions.set_error, "Invalid service option")
            return False
        return handler()

    def handle_upsell_purchase(self) -> bool:
        self.dispatch(transitions.hide_upsell_modal)
        return self.improve_only()

    def apply_coupon(self, coupon_code: str) -> bool:
        try:
            result = self.api.validate_coupon(coupon_code)
        except ApiClientError as exc:
            self.dispatch(transitions.set_error, exc.server_error or exc.message)
            return False

        if not result.get("valid"):
            self.dispatch(transitions.set_error, result.get("error") or "Invalid coupon code")
            return False

        self.dispatch(transitions.clear_error)
        if self.tracker is not None:
            self.tracker.track_coupon_used(coupon_code.strip().upper())
        return True

    def create_payment_session(
        self,
        customer_email: str,
        metadata: Optional[Mapping[str, Any]] = None,
        embedded: bool = True,
    ) -> Optional[Dict[str, Any]]:
        """Start checkout for the selected option; a second call while one is pending returns None."""
        if self.state.is_processing_payment:
            return None
        option = self.state.selected_option
        if option is None:
            self.dispatch(transitions.set_error, "Please select a service option")
            return None

        self.dispatch(transitions.start_payment)
        try:
            session = self.api.create_checkout_session(option.value, customer_email, metadata, embedded)
        except ApiClientError as exc:
            self.dispatch(transitions.set_error, exc.server_error or exc.message)
            raise
        finally:
            self.dispatch(transitions.stop_payment)

        self.dispatch(transitions.set_payment_session, session.get("sessionId"), session.get("paymentMode"))
        if self.tracker is not None:
            self.tracker.track_payment_initiated(option.value, customer_email, self.state.terms_accepted)
        return session

    def verify_payment(self, session_id: str) -> Dict[str, Any]:
        try:
            result = self.api.verify_session(session_id)
        except ApiClientError as exc:
            self.dispatch(transitions.set_error, exc.server_error or exc.message)
            raise

        if self.tracker is not None and result.get("paid"):
            metadata = result.get("metadata") or {}
            self.tracker.track_payment_completed(session_id, metadata.get("serviceOption"))
        return result

    def save_progress(self) -> None:
        if self.persistence is not None:
            self.persistence.save(self.state)

    def restore_progress(self) -> bool:
        """Load saved form fields back into the state; True when something was restored."""
        if self.persistence is None:
            return False
        restored = self.persistence.restore()
        if restored is None:
            return False

        self.dispatch(
            transitions.restore_fields,
            restored.cv_file,
            restored.role,
            restored.job_description,
            restored.selected_option,
        )
        self.persistence.clear()
        return True
