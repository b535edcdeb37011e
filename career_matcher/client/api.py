"""HTTP client for the Career Matcher API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx
from werkzeug.http import parse_options_header

from career_matcher.client.state import CVFile

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0  # seconds; uploads wait on two LLM calls and Chromium
MAX_FILE_SIZE = 10 * 1024 * 1024
ALLOWED_CONTENT_TYPES = (
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

STATUS_MESSAGES = {
    401: "Unauthorized. Please log in.",
    403: "Forbidden. You do not have permission.",
    404: "Resource not found.",
    413: "File too large. Please upload a smaller file.",
    500: "Server error. Please try again later.",
    503: "Service unavailable. Please try again later.",
}
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."


class ApiClientError(Exception):
    """A request failed; ``message`` is safe to show to the user."""

    def __init__(self, message: str, status: Optional[int] = None, server_error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.server_error = server_error


@dataclass(frozen=True)
class DownloadedFile:
    filename: str
    content: bytes
    content_type: str


def _server_error(response: httpx.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return None


def error_message_for(status: int, server_error: Optional[str]) -> str:
    if status == 400:
        return server_error or "Bad request. Please check your input."
    if status in STATUS_MESSAGES:
        return STATUS_MESSAGES[status]
    return server_error or "An error occurred."


def validate_cv_file(cv_file: Optional[CVFile]) -> None:
    if cv_file is None:
        raise ApiClientError("Please select a CV file")
    if cv_file.size > MAX_FILE_SIZE:
        raise ApiClientError("File size must be less than 10MB")
    if cv_file.content_type not in ALLOWED_CONTENT_TYPES:
        raise ApiClientError("Only PDF and DOCX files are allowed")


def validate_form_data(cv_file: Optional[CVFile], role: str) -> None:
    validate_cv_file(cv_file)
    if not role or not role.strip():
        raise ApiClientError("Please enter a role/job title")


class CVAnalysisApi:
    """Thin wrapper over ``httpx.Client`` that maps failures to ``ApiClientError``."""

    def __init__(
        self,
        base_url: str = "",
        *,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CVAnalysisApi":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            _LOGGER.error("Request to %s failed: %s", path, exc)
            raise ApiClientError(NETWORK_ERROR_MESSAGE) from exc

        if response.is_error:
            server_error = _server_error(response)
            raise ApiClientError(
                error_message_for(response.status_code, server_error),
                status=response.status_code,
                server_error=server_error,
            )
        return response

    # CV workflow

    def _upload(self, path: str, cv_file: Optional[CVFile], role: str, job_description: str) -> DownloadedFile:
        validate_form_data(cv_file, role)
        data = {"role": role}
        if job_description and job_description.strip():
            data["jobDescription"] = job_description

        response = self._request(
            "POST",
            path,
            data=data,
            files={"cv": (cv_file.name, cv_file.content, cv_file.content_type)},
        )
        _, options = parse_options_header(response.headers.get("content-disposition", ""))
        return DownloadedFile(
            filename=options.get("filename") or "download",
            content=response.content,
            content_type=response.headers.get("content-type", "application/octet-stream"),
        )

    def analyze_cv_only(self, cv_file: Optional[CVFile], role: str, job_description: str = "") -> DownloadedFile:
        return self._upload("/api/analyze-only", cv_file, role, job_description)

    def improve_cv_only(self, cv_file: Optional[CVFile], role: str, job_description: str = "") -> DownloadedFile:
        return self._upload("/api/improve-only", cv_file, role, job_description)

    def analyze_and_improve_cv(
        self, cv_file: Optional[CVFile], role: str, job_description: str = ""
    ) -> DownloadedFile:
        return self._upload("/api/analyze-cv", cv_file, role, job_description)

    # payments and coupons

    def validate_coupon(self, coupon_code: str) -> Dict[str, Any]:
        if not coupon_code or not coupon_code.strip():
            raise ApiClientError("Coupon code is required")
        return self._request("POST", "/api/validate-coupon", json={"couponCode": coupon_code.strip()}).json()

    def create_checkout_session(
        self,
        service_option: str,
        customer_email: str,
        metadata: Optional[Mapping[str, Any]] = None,
        embedded: bool = True,
    ) -> Dict[str, Any]:
        if not service_option:
            raise ApiClientError("Service option is required")
        if not customer_email:
            raise ApiClientError("Customer email is required")
        payload = {
            "serviceOption": service_option,
            "customerEmail": customer_email,
            "metadata": dict(metadata or {}),
            "embedded": embedded,
        }
        return self._request("POST", "/api/create-checkout-session", json=payload).json()

    def verify_session(self, session_id: str) -> Dict[str, Any]:
        if not session_id:
            raise ApiClientError("Session ID is required")
        return self._request("POST", "/api/verify-session", json={"sessionId": session_id}).json()

    def track_event(self, event: Mapping[str, Any]) -> None:
        self._request("POST", "/api/analytics", json=dict(event))
