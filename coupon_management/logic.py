from datetime import datetime
from typing import Iterable, List, Optional

from .exceptions import CouponNotFoundError
from .logger import get_logger
from .models import (
    Candidate,
    Cart,
    Coupon,
    DiscountType,
    EligibilityResult,
    SelectionResult,
    UserContext,
)
from .storage import CouponCatalog, UsageLedger
from .utils import utc_now

logger = get_logger("logic")

ANONYMOUS_USER_ID = "anonymous"


def cart_total(cart: Optional[Cart]) -> float:
    if cart is None:
        return 0.0
    return sum(max(0.0, item.quantity * item.unitPrice) for item in cart.items)


def cart_item_count(cart: Optional[Cart]) -> float:
    if cart is None:
        return 0.0
    return sum(item.quantity for item in cart.items)


def is_within_window(coupon: Coupon, now: datetime) -> bool:
    return coupon.startDate <= now <= coupon.endDate


def _ineligible(reason: str) -> EligibilityResult:
    return EligibilityResult(eligible=False, reason=reason)


def evaluate_eligibility(
    coupon: Coupon, user: Optional[UserContext], cart: Optional[Cart]
) -> EligibilityResult:
    """
    Check a coupon's eligibility predicates against a user and cart.

    Predicates are checked in a fixed order and the first failure is
    reported. User predicates fail closed: a missing user context, or a
    missing field a configured predicate needs, does not satisfy it.
    """
    elig = coupon.eligibility
    if elig is None:
        return EligibilityResult(eligible=True)

    # User based
    if elig.allowedUserTiers:
        if user is None or user.userTier not in elig.allowedUserTiers:
            return _ineligible("user tier not allowed")

    if elig.minLifetimeSpend is not None:
        if user is None or user.lifetimeSpend is None or user.lifetimeSpend < elig.minLifetimeSpend:
            return _ineligible("lifetime spend too low")

    if elig.minOrdersPlaced is not None:
        if user is None or user.ordersPlaced is None or user.ordersPlaced < elig.minOrdersPlaced:
            return _ineligible("ordersPlaced too low")

    if elig.firstOrderOnly:
        if user is None or user.ordersPlaced != 0:
            return _ineligible("not first order")

    if elig.allowedCountries:
        if user is None or user.country not in elig.allowedCountries:
            return _ineligible("country not allowed")

    # Cart based
    if elig.minCartValue is not None and cart_total(cart) < elig.minCartValue:
        return _ineligible("cart value too low")

    categories = {item.category for item in cart.items} if cart is not None else set()

    if elig.applicableCategories:
        # at least one item from these categories
        if not any(c in elig.applicableCategories for c in categories):
            return _ineligible("no applicable categories in cart")

    if elig.excludedCategories:
        if any(c in elig.excludedCategories for c in categories):
            return _ineligible("cart has excluded category")

    if elig.minItemsCount is not None and cart_item_count(cart) < elig.minItemsCount:
        return _ineligible("not enough items in cart")

    return EligibilityResult(eligible=True)


def compute_discount(coupon: Coupon, cart_value: float) -> float:
    if coupon.discountType == DiscountType.FLAT:
        discount = min(coupon.discountValue, cart_value)
    elif coupon.discountType == DiscountType.PERCENT:
        discount = cart_value * (coupon.discountValue / 100.0)
        if coupon.maxDiscountAmount is not None:
            discount = min(discount, coupon.maxDiscountAmount)
    else:
        discount = 0.0
    return max(0.0, discount)


def check_usage_limit(coupon: Coupon, user_id: str, ledger: UsageLedger) -> bool:
    if coupon.usageLimitPerUser is None:
        return True
    return ledger.get(user_id, coupon.code) < coupon.usageLimitPerUser


def record_usage(catalog: CouponCatalog, ledger: UsageLedger, user_id: str, code: str) -> int:
    """
    Mark a coupon as used once by a user; returns the new count.

    Raises:
        CouponNotFoundError: if the code is not in the catalog.
    """
    if code not in catalog:
        raise CouponNotFoundError(code)
    usage = ledger.increment(user_id, code)
    logger.info("Usage recorded: user=%s coupon=%s count=%d", user_id, code, usage)
    return usage


def resolve_user_id(
    user: Optional[UserContext],
    user_id: Optional[str] = None,
    anonymous_id: str = ANONYMOUS_USER_ID,
) -> str:
    return user_id or (user.userId if user is not None else None) or anonymous_id


def pick_best_coupon(candidates: List[Candidate]) -> Optional[Candidate]:
    """
    Rule:
     1. Highest discount
     2. If tie, earliest endDate
     3. If still tie, lexicographically smaller code
    """
    if not candidates:
        return None

    return min(
        candidates,
        key=lambda cand: (
            -cand.discount,         # highest discount first
            cand.endDate,           # earliest endDate
            cand.coupon.code        # lexicographically smaller code
        )
    )


def select_best_coupon(
    coupons: Iterable[Coupon],
    user: Optional[UserContext],
    cart: Optional[Cart],
    ledger: UsageLedger,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
    anonymous_id: str = ANONYMOUS_USER_ID,
) -> Optional[SelectionResult]:
    """
    Pick the best applicable coupon for a user and cart.

    Each coupon must be inside its validity window, under the user's usage
    limit, eligible, and yield a positive discount. Survivors are ranked by
    :func:`pick_best_coupon`. The ledger is only read.

    Returns:
        The winning coupon, or None when no coupon applies.
    """
    if now is None:
        now = utc_now()
    uid = resolve_user_id(user, user_id, anonymous_id)
    cart_value = cart_total(cart)

    candidates: List[Candidate] = []
    for coupon in coupons:
        # 1. date validity
        if not is_within_window(coupon, now):
            logger.debug("Skipping %s: outside validity window", coupon.code)
            continue

        # 2. usage limit per user
        if not check_usage_limit(coupon, uid, ledger):
            logger.debug("Skipping %s: usage limit reached for %s", coupon.code, uid)
            continue

        # 3. eligibility checks
        result = evaluate_eligibility(coupon, user, cart)
        if not result.eligible:
            logger.debug("Skipping %s: %s", coupon.code, result.reason)
            continue

        # 4. compute discount
        discount = compute_discount(coupon, cart_value)
        if discount <= 0:
            logger.debug("Skipping %s: no effective discount", coupon.code)
            continue

        candidates.append(Candidate(coupon=coupon, discount=discount, endDate=coupon.endDate))

    best = pick_best_coupon(candidates)
    if best is None:
        logger.info("No applicable coupon for user=%s cart_value=%.2f", uid, cart_value)
        return None

    logger.info("Best coupon for user=%s: %s (%.2f)", uid, best.coupon.code, best.discount)
    return SelectionResult(
        code=best.coupon.code,
        description=best.coupon.description,
        discountAmount=round(best.discount, 2),
        coupon=best.coupon,
    )
