"""Tests for coupon payload validation and normalization."""

from datetime import datetime, timezone

import pytest

from coupon_management.exceptions import CouponValidationError
from coupon_management.models import DiscountType
from coupon_management.utils import parse_datetime_safe
from coupon_management.validation import normalize_coupon, validate_coupon
from tests.conftest import coupon_payload


def test_valid_payload():
    result = validate_coupon(coupon_payload())
    assert result.valid
    assert result.errors == []


@pytest.mark.parametrize("payload", [None, "coupon", 42, ["code"]])
def test_non_object_payload(payload):
    result = validate_coupon(payload)
    assert not result.valid
    assert result.errors == ["Body must be a JSON coupon object"]


def test_errors_are_aggregated():
    result = validate_coupon({"discountType": "BOGO", "discountValue": -1})
    assert not result.valid
    assert result.errors == [
        "code required (string)",
        "description required",
        'discountType must be "FLAT" or "PERCENT"',
        "discountValue must be non-negative number",
        "startDate missing or invalid ISO date",
        "endDate missing or invalid ISO date",
    ]


@pytest.mark.parametrize("field,value,message", [
    ("code", 123, "code required (string)"),
    ("code", "", "code required (string)"),
    ("description", "", "description required"),
    ("discountType", "flat", 'discountType must be "FLAT" or "PERCENT"'),
    ("discountValue", "10", "discountValue must be non-negative number"),
    ("discountValue", True, "discountValue must be non-negative number"),
    ("startDate", "yesterday", "startDate missing or invalid ISO date"),
    ("endDate", None, "endDate missing or invalid ISO date"),
    ("usageLimitPerUser", 0, "usageLimitPerUser must be integer >= 1 when provided"),
    ("usageLimitPerUser", 1.5, "usageLimitPerUser must be integer >= 1 when provided"),
    ("eligibility", "VIP only", "eligibility must be an object if provided"),
    ("eligibility", ["VIP"], "eligibility must be an object if provided"),
])
def test_single_field_errors(field, value, message):
    result = validate_coupon(coupon_payload(**{field: value}))
    assert not result.valid
    assert result.errors == [message]


def test_start_equal_end_rejected():
    payload = coupon_payload(startDate="2025-06-01T00:00:00Z", endDate="2025-06-01T00:00:00Z")
    result = validate_coupon(payload)
    assert "startDate must be before endDate" in result.errors


def test_start_after_end_rejected():
    payload = coupon_payload(startDate="2025-07-01", endDate="2025-06-01")
    assert validate_coupon(payload).errors == ["startDate must be before endDate"]


def test_order_not_compared_when_date_invalid():
    payload = coupon_payload(startDate="garbage")
    assert validate_coupon(payload).errors == ["startDate missing or invalid ISO date"]


def test_max_discount_checked_for_percent_only():
    percent = coupon_payload(discountType="PERCENT", maxDiscountAmount=-5)
    assert validate_coupon(percent).errors == [
        "maxDiscountAmount must be non-negative number when provided"
    ]
    flat = coupon_payload(maxDiscountAmount=-5)
    assert validate_coupon(flat).valid


def test_optional_fields_may_be_null():
    payload = coupon_payload(
        discountType="PERCENT", maxDiscountAmount=None, usageLimitPerUser=None, eligibility=None
    )
    assert validate_coupon(payload).valid


def test_eligibility_subfields_not_validated():
    payload = coupon_payload(eligibility={"minCartValue": "a lot", "allowedCountries": 7})
    assert validate_coupon(payload).valid


def test_normalize_canonicalizes_dates():
    coupon = normalize_coupon(coupon_payload(
        startDate="2025-06-01T05:30:00+05:30", endDate="2025-07-01",
    ))
    assert coupon.startDate == datetime(2025, 6, 1, 0, 0, tzinfo=timezone.utc)
    assert coupon.endDate == datetime(2025, 7, 1, tzinfo=timezone.utc)
    assert coupon.discountType == DiscountType.FLAT
    assert coupon.eligibility is None


def test_normalize_drops_malformed_eligibility_fields():
    coupon = normalize_coupon(coupon_payload(eligibility={"minCartValue": "x", "minItemsCount": 2}))
    assert coupon.eligibility.minCartValue is None
    assert coupon.eligibility.minItemsCount == 2


def test_normalize_raises_with_all_errors():
    with pytest.raises(CouponValidationError) as excinfo:
        normalize_coupon({"code": "X"})
    assert "description required" in excinfo.value.errors
    assert "startDate missing or invalid ISO date" in excinfo.value.errors


@pytest.mark.parametrize("value,expected", [
    ("2025-06-01T00:00:00Z", datetime(2025, 6, 1, tzinfo=timezone.utc)),
    ("2025-06-01T00:00:00.000Z", datetime(2025, 6, 1, tzinfo=timezone.utc)),
    ("2025-06-01", datetime(2025, 6, 1, tzinfo=timezone.utc)),
    ("2025-06-01T02:00:00+02:00", datetime(2025, 6, 1, tzinfo=timezone.utc)),
    ("", None),
    ("not a date", None),
    (20250601, None),
])
def test_parse_datetime_safe(value, expected):
    assert parse_datetime_safe(value) == expected
