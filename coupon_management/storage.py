import threading
from typing import Dict, Iterator, List, Optional

from .exceptions import DuplicateCouponError
from .models import Coupon


class CouponCatalog:
    """Append-only, insertion-ordered coupon store keyed by code."""

    def __init__(self, coupons: Optional[List[Coupon]] = None):
        # code -> Coupon
        self._coupons: Dict[str, Coupon] = {}
        self._lock = threading.Lock()
        for coupon in coupons or []:
            self.add(coupon)

    def add(self, coupon: Coupon) -> Coupon:
        with self._lock:
            if coupon.code in self._coupons:
                raise DuplicateCouponError(coupon.code)
            self._coupons[coupon.code] = coupon
        return coupon

    def get(self, code: str) -> Optional[Coupon]:
        return self._coupons.get(code)

    def all(self) -> List[Coupon]:
        return list(self._coupons.values())

    def __contains__(self, code: object) -> bool:
        return code in self._coupons

    def __iter__(self) -> Iterator[Coupon]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._coupons)


class UsageLedger:
    """Per-user, per-coupon usage counts."""

    def __init__(self):
        # userId -> couponCode -> usageCount
        self._usage: Dict[str, Dict[str, int]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str, code: str) -> int:
        return self._usage.get(user_id, {}).get(code, 0)

    def increment(self, user_id: str, code: str) -> int:
        with self._lock:
            per_user = self._usage.setdefault(user_id, {})
            per_user[code] = per_user.get(code, 0) + 1
            return per_user[code]

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        return {user_id: dict(counts) for user_id, counts in self._usage.items()}
