"""Exception types mapped onto HTTP error responses."""

from __future__ import annotations


class ApiError(Exception):
    """An error that carries the HTTP status it should be reported with."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(ApiError):
    status_code = 400


class UnsupportedFileTypeError(BadRequestError):
    def __init__(self, message: str = "Unsupported file type") -> None:
        super().__init__(message)


class WebhookSignatureError(BadRequestError):
    pass


class UpstreamError(ApiError):
    """A failure in one of the external stages (OpenAI, Stripe, Chromium)."""

    status_code = 500


class LLMResponseError(UpstreamError):
    """The model replied, but not with the JSON shape we asked for."""


class ConfigurationError(RuntimeError):
    """Required settings are missing."""
