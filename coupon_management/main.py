from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from fastapi import Body, FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, settings as default_settings
from .exceptions import CouponNotFoundError, CouponValidationError, DuplicateCouponError
from .logger import get_logger, set_level
from .logic import record_usage, select_best_coupon
from .models import BestCouponRequest, BestCouponResponse, Coupon, UseCouponRequest
from .storage import CouponCatalog, UsageLedger
from .utils import utc_now
from .validation import normalize_coupon

logger = get_logger("api")

Clock = Callable[[], datetime]


def sample_coupons(now: datetime) -> list:
    plus30 = now + timedelta(days=30)
    plus60 = now + timedelta(days=60)
    return [
        Coupon(
            code="WELCOME100",
            description="₹100 off for new users on min cart ₹500",
            discountType="FLAT",
            discountValue=100,
            startDate=now,
            endDate=plus30,
            usageLimitPerUser=1,
            eligibility={
                "allowedUserTiers": ["NEW"],
                "minCartValue": 500,
                "firstOrderOnly": True,
            },
        ),
        Coupon(
            code="FESTIVE10",
            description="10% off up to ₹200 for all users",
            discountType="PERCENT",
            discountValue=10,
            maxDiscountAmount=200,
            startDate=now,
            endDate=plus60,
            eligibility={
                "minCartValue": 1000,
                "excludedCategories": ["gift-cards"],
            },
        ),
        Coupon(
            code="ELECTRO50",
            description="₹50 off electronics on min 1 elect. item",
            discountType="FLAT",
            discountValue=50,
            startDate=now,
            endDate=plus60,
            eligibility={"applicableCategories": ["electronics"]},
        ),
    ]


def seed_sample_coupons(catalog: CouponCatalog, now: datetime) -> None:
    if len(catalog) > 0:
        return
    for coupon in sample_coupons(now):
        catalog.add(coupon)
    logger.info("Seeded %d sample coupons", len(catalog))


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    catalog: Optional[CouponCatalog] = None,
    ledger: Optional[UsageLedger] = None,
) -> FastAPI:
    settings = settings or default_settings
    clock = clock or utc_now
    set_level(settings.LOG_LEVEL)

    app = FastAPI(title=settings.PROJECT_NAME)
    app.state.settings = settings
    app.state.clock = clock
    app.state.catalog = catalog if catalog is not None else CouponCatalog()
    app.state.ledger = ledger if ledger is not None else UsageLedger()

    if settings.SEED_SAMPLE_COUPONS:
        seed_sample_coupons(app.state.catalog, clock())

    @app.exception_handler(CouponValidationError)
    async def invalid_coupon_handler(request: Request, exc: CouponValidationError):
        logger.warning("Coupon rejected: %s", exc.errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "invalid coupon", "details": exc.errors},
        )

    @app.exception_handler(DuplicateCouponError)
    async def duplicate_coupon_handler(request: Request, exc: DuplicateCouponError):
        logger.warning("Duplicate coupon rejected: %s", exc.code)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "coupon code already exists. duplicate creation rejected"},
        )

    @app.exception_handler(CouponNotFoundError)
    async def coupon_not_found_handler(request: Request, exc: CouponNotFoundError):
        logger.warning("Usage recorded against unknown coupon: %s", exc.code)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "coupon not found"},
        )

    @app.get("/", response_class=PlainTextResponse)
    def index(request: Request):
        now = request.app.state.clock()
        return f"Coupon Management Service - running {now.isoformat()}"

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.post("/coupons", status_code=status.HTTP_201_CREATED)
    def create_coupon(request: Request, payload: Any = Body(None)):
        coupon = normalize_coupon(payload)
        request.app.state.catalog.add(coupon)
        logger.info("Coupon created: %s", coupon.code)
        return {"message": "coupon created", "coupon": coupon}

    @app.get("/coupons")
    def list_coupons(request: Request):
        return {"coupons": request.app.state.catalog.all()}

    @app.post("/best-coupon", response_model=BestCouponResponse)
    def best_coupon(request: Request, payload: Optional[BestCouponRequest] = None):
        payload = payload or BestCouponRequest()
        state = request.app.state
        best = select_best_coupon(
            state.catalog,
            payload.userContext,
            payload.cart,
            state.ledger,
            user_id=payload.userId,
            now=state.clock(),
            anonymous_id=state.settings.ANONYMOUS_USER_ID,
        )
        return BestCouponResponse(best=best)

    @app.post("/use-coupon")
    def use_coupon(request: Request, payload: Optional[UseCouponRequest] = None):
        payload = payload or UseCouponRequest()
        if not payload.userId or not payload.couponCode:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "userId and couponCode required"},
            )
        state = request.app.state
        usage = record_usage(state.catalog, state.ledger, payload.userId, payload.couponCode)
        return {"message": "usage recorded", "usage": usage}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "coupon_management.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=False,  # keep False to avoid Windows reload issues
    )
