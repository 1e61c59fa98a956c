from .logic import (
    cart_item_count,
    cart_total,
    check_usage_limit,
    compute_discount,
    evaluate_eligibility,
    record_usage,
    select_best_coupon,
)
from .validation import validate_coupon

__all__ = [
    "cart_item_count",
    "cart_total",
    "check_usage_limit",
    "compute_discount",
    "evaluate_eligibility",
    "record_usage",
    "select_best_coupon",
    "validate_coupon",
]
