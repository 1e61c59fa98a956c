from typing import List


class CouponError(Exception):
    """Base class for errors reported by the coupon service."""


class CouponValidationError(CouponError):
    """Raised when a coupon payload fails admission checks."""

    def __init__(self, errors: List[str]):
        super().__init__("invalid coupon: " + "; ".join(errors))
        self.errors = list(errors)


class DuplicateCouponError(CouponError):
    """Raised when a coupon code is already present in the catalog."""

    def __init__(self, code: str):
        super().__init__(f"coupon code already exists: {code}")
        self.code = code


class CouponNotFoundError(CouponError):
    """Raised when usage is recorded against an unknown coupon code."""

    def __init__(self, code: str):
        super().__init__(f"coupon not found: {code}")
        self.code = code
