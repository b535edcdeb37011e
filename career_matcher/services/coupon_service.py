"""Static allow-list coupon validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from career_matcher.config import parse_coupon_codes

_LOGGER = logging.getLogger(__name__)

INVALID_MESSAGE = "Invalid coupon code"
VALID_MESSAGE = "Coupon code is valid"


@dataclass(frozen=True)
class CouponResult:
    valid: bool
    message: str


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def validate_coupon(code: Optional[str], allowed_codes: Union[str, Iterable[str], None]) -> CouponResult:
    """Check `code` against the allow-list, ignoring case and surrounding whitespace."""
    if isinstance(allowed_codes, str) or allowed_codes is None:
        allowed = parse_coupon_codes(allowed_codes)
    else:
        allowed = [normalize_code(item) for item in allowed_codes if normalize_code(item)]

    normalized = normalize_code(code)

    if not allowed:
        _LOGGER.warning("No coupon codes configured in VALID_COUPON_CODES")
        return CouponResult(valid=False, message=INVALID_MESSAGE)

    if normalized and normalized in allowed:
        _LOGGER.info("Valid coupon code used: %s", normalized)
        return CouponResult(valid=True, message=VALID_MESSAGE)

    _LOGGER.info("Invalid coupon code attempted: %s", normalized)
    return CouponResult(valid=False, message=INVALID_MESSAGE)
