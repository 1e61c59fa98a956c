"""Shared fixtures for the coupon service tests."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from coupon_management.config import Settings
from coupon_management.main import create_app
from coupon_management.storage import CouponCatalog, UsageLedger
from coupon_management.validation import normalize_coupon

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def coupon_payload(**overrides):
    """A valid FLAT coupon payload open around NOW."""
    payload = {
        "code": "FLAT50",
        "description": "50 off",
        "discountType": "FLAT",
        "discountValue": 50,
        "startDate": (NOW - timedelta(days=1)).isoformat(),
        "endDate": (NOW + timedelta(days=30)).isoformat(),
    }
    payload.update(overrides)
    return payload


def make_coupon(**overrides):
    return normalize_coupon(coupon_payload(**overrides))


def make_cart(*items):
    """Build a cart from (category, unitPrice, quantity) tuples."""
    return {
        "items": [
            {"productId": f"p{i}", "category": c, "unitPrice": p, "quantity": q}
            for i, (c, p, q) in enumerate(items)
        ]
    }


@pytest.fixture
def catalog():
    return CouponCatalog()


@pytest.fixture
def ledger():
    return UsageLedger()


@pytest.fixture
def client(catalog, ledger):
    settings = Settings(SEED_SAMPLE_COUPONS=False, LOG_LEVEL="WARNING")
    app = create_app(settings=settings, clock=lambda: NOW, catalog=catalog, ledger=ledger)
    return TestClient(app)
