from collections.abc import Mapping
from typing import Any, List

from .exceptions import CouponValidationError
from .models import Coupon, DiscountType, ValidationResult
from .utils import is_number, parse_datetime_safe

DISCOUNT_TYPES = {t.value for t in DiscountType}


def validate_coupon(payload: Any) -> ValidationResult:
    """
    Check a proposed coupon definition.

    Every check runs independently so the caller sees all problems at once.
    Fields inside ``eligibility`` are not checked here; malformed predicates
    are dropped when the coupon is normalized.
    """
    errors: List[str] = []
    if not isinstance(payload, Mapping):
        errors.append("Body must be a JSON coupon object")
        return ValidationResult(valid=False, errors=errors)

    code = payload.get("code")
    if not code or not isinstance(code, str):
        errors.append("code required (string)")

    if not payload.get("description"):
        errors.append("description required")

    discount_type = payload.get("discountType")
    if not isinstance(discount_type, str) or discount_type not in DISCOUNT_TYPES:
        errors.append('discountType must be "FLAT" or "PERCENT"')

    discount_value = payload.get("discountValue")
    if not is_number(discount_value) or discount_value < 0:
        errors.append("discountValue must be non-negative number")

    if discount_type == DiscountType.PERCENT.value:
        max_discount = payload.get("maxDiscountAmount")
        if max_discount is not None and (not is_number(max_discount) or max_discount < 0):
            errors.append("maxDiscountAmount must be non-negative number when provided")

    start = parse_datetime_safe(payload.get("startDate"))
    end = parse_datetime_safe(payload.get("endDate"))
    if start is None:
        errors.append("startDate missing or invalid ISO date")
    if end is None:
        errors.append("endDate missing or invalid ISO date")
    if start is not None and end is not None and start >= end:
        errors.append("startDate must be before endDate")

    usage_limit = payload.get("usageLimitPerUser")
    if usage_limit is not None and (
        isinstance(usage_limit, bool) or not isinstance(usage_limit, int) or usage_limit < 1
    ):
        errors.append("usageLimitPerUser must be integer >= 1 when provided")

    eligibility = payload.get("eligibility")
    if eligibility is not None and not isinstance(eligibility, Mapping):
        errors.append("eligibility must be an object if provided")

    return ValidationResult(valid=not errors, errors=errors)


def normalize_coupon(payload: Any) -> Coupon:
    """Validate a payload and build the stored coupon with UTC dates."""
    result = validate_coupon(payload)
    if not result.valid:
        raise CouponValidationError(result.errors)

    return Coupon.model_validate(dict(payload))
