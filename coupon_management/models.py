from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .utils import coerce_number, is_number, parse_datetime_safe


class DiscountType(str, Enum):
    FLAT = "FLAT"
    PERCENT = "PERCENT"


class Eligibility(BaseModel):
    # User based
    allowedUserTiers: Optional[List[Any]] = None
    minLifetimeSpend: Optional[float] = None
    minOrdersPlaced: Optional[float] = None
    firstOrderOnly: bool = False
    allowedCountries: Optional[List[Any]] = None

    # Cart based
    minCartValue: Optional[float] = None
    applicableCategories: Optional[List[Any]] = None
    excludedCategories: Optional[List[Any]] = None
    minItemsCount: Optional[float] = None

    # malformed predicates are dropped, an unusable rule is not a rule
    @field_validator(
        "minLifetimeSpend", "minOrdersPlaced", "minCartValue", "minItemsCount",
        mode="before",
    )
    @classmethod
    def _numbers_only(cls, value: Any) -> Optional[float]:
        return value if is_number(value) else None

    @field_validator(
        "allowedUserTiers", "allowedCountries", "applicableCategories", "excludedCategories",
        mode="before",
    )
    @classmethod
    def _lists_only(cls, value: Any) -> Optional[List[Any]]:
        return value if isinstance(value, list) else None

    @field_validator("firstOrderOnly", mode="before")
    @classmethod
    def _strict_true(cls, value: Any) -> bool:
        return value is True


class Coupon(BaseModel):
    code: str
    description: str
    discountType: DiscountType
    discountValue: float
    maxDiscountAmount: Optional[float] = None

    startDate: datetime
    endDate: datetime

    usageLimitPerUser: Optional[int] = None
    eligibility: Optional[Eligibility] = None

    @field_validator("startDate", "endDate", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> Any:
        parsed = parse_datetime_safe(value)
        return parsed if parsed is not None else value

    @field_validator("startDate", "endDate")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # always a UTC instant
        return parse_datetime_safe(value)

    @field_validator("description", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return value if isinstance(value, str) else str(value)

    @field_validator("maxDiscountAmount", mode="before")
    @classmethod
    def _optional_number(cls, value: Any) -> Optional[float]:
        # only validated for PERCENT coupons, where it is meaningful
        return value if is_number(value) else None


class UserContext(BaseModel):
    userId: Optional[str] = None
    userTier: Optional[str] = None  # e.g. NEW, REGULAR, GOLD
    country: Optional[str] = None
    lifetimeSpend: Optional[float] = None
    ordersPlaced: Optional[float] = None

    @field_validator("userId", "userTier", "country", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("lifetimeSpend", "ordersPlaced", mode="before")
    @classmethod
    def _optional_number(cls, value: Any) -> Optional[float]:
        return value if is_number(value) else None


class CartItem(BaseModel):
    productId: Optional[str] = None
    category: Optional[str] = None
    unitPrice: float = 0.0
    quantity: float = 0.0

    @field_validator("productId", "category", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("unitPrice", mode="before")
    @classmethod
    def _price(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> float:
        return max(0.0, coerce_number(value))


class Cart(BaseModel):
    items: List[CartItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _well_formed_items(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, (dict, CartItem))]


class BestCouponRequest(BaseModel):
    userContext: Optional[UserContext] = None
    cart: Optional[Cart] = None
    userId: Optional[str] = None

    @field_validator("userContext", "cart", mode="before")
    @classmethod
    def _objects_only(cls, value: Any) -> Any:
        if isinstance(value, (dict, BaseModel)):
            return value
        return None

    @field_validator("userId", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class UseCouponRequest(BaseModel):
    userId: Optional[str] = None
    couponCode: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class EligibilityResult(BaseModel):
    eligible: bool
    reason: Optional[str] = None


class Candidate(BaseModel):
    coupon: Coupon
    discount: float
    endDate: datetime


class SelectionResult(BaseModel):
    code: str
    description: str
    discountAmount: float
    coupon: Coupon


class BestCouponResponse(BaseModel):
    best: Optional[SelectionResult] = None
