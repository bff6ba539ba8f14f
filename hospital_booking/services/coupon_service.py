import logging
import re
from sqlalchemy import asc, desc, update
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from hospital_booking.config import settings
from hospital_booking.database import utcnow, as_naive_utc
from hospital_booking.errors import (
    BadRequestError, ConflictError, NotFoundError, CouponExpiredError, LimitReachedError,
    BelowMinimumError, ServiceNotApplicableError, SpecialtyNotApplicableError,
)
from hospital_booking.models.catalog import Service, Specialty
from hospital_booking.models.coupon import Coupon
from hospital_booking.schemas.coupon import CouponCreate, CouponUpdate
from hospital_booking.services.discount_calculator import DiscountCalculator, format_currency

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r"^[A-Z0-9]{3,15}$")
SORTABLE_FIELDS = ("created_at", "code", "discount_value", "start_date", "end_date", "used_count")


def normalize_code(code: str) -> str:
    return code.strip().upper()


class CouponService:
    """Service class for CRUD operations on coupons"""

    @staticmethod
    def create_coupon(db: Session, coupon_data: CouponCreate, created_by_id: Optional[int] = None) -> Coupon:
        code = normalize_code(coupon_data.code)
        CouponService._validate_code(db, code)
        CouponService._validate_discount(coupon_data.discount_type, coupon_data.discount_value)

        now = utcnow()
        start_date = as_naive_utc(coupon_data.start_date) or now
        end_date = as_naive_utc(coupon_data.end_date)
        CouponService._validate_dates(start_date, end_date, now)

        is_active = True if coupon_data.is_active is None else coupon_data.is_active
        # A coupon scheduled for later stays inactive until an admin enables it
        if start_date > now:
            is_active = False

        db_coupon = Coupon(
            code=code,
            description=coupon_data.description,
            discount_type=coupon_data.discount_type,
            discount_value=coupon_data.discount_value,
            max_discount=coupon_data.max_discount,
            min_purchase=coupon_data.min_purchase,
            start_date=start_date,
            end_date=end_date,
            usage_limit=coupon_data.usage_limit,
            is_active=is_active,
            created_by_id=created_by_id,
            applicable_services=CouponService._load_services(db, coupon_data.applicable_services),
            applicable_specialties=CouponService._load_specialties(db, coupon_data.applicable_specialties),
        )
        db.add(db_coupon)
        db.commit()
        db.refresh(db_coupon)
        logger.info("Coupon %s created by user %s", db_coupon.code, created_by_id)
        return db_coupon

    @staticmethod
    def get_coupon(db: Session, coupon_id: int) -> Optional[Coupon]:
        return db.query(Coupon).filter(Coupon.id == coupon_id).first()

    @staticmethod
    def get_coupons(
        db: Session,
        code: Optional[str] = None,
        is_active: Optional[bool] = None,
        discount_type: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> Tuple[List[Coupon], int]:
        limit = min(max(limit, 1), 500)
        page = max(page, 1)
        q = db.query(Coupon)
        if code:
            q = q.filter(Coupon.code.ilike(f"%{code.strip()}%"))
        if is_active is not None:
            q = q.filter(Coupon.is_active == is_active)
        if discount_type:
            q = q.filter(Coupon.discount_type == discount_type)
        total = q.count()

        column = getattr(Coupon, sort_by if sort_by in SORTABLE_FIELDS else "created_at")
        q = q.order_by(asc(column) if order == "asc" else desc(column), Coupon.id)
        return q.offset((page - 1) * limit).limit(limit).all(), total

    @staticmethod
    def update_coupon(db: Session, coupon_id: int, coupon_data: CouponUpdate, updated_by_id: Optional[int] = None) -> Optional[Coupon]:
        db_coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
        if not db_coupon:
            return None

        if coupon_data.code is not None:
            code = normalize_code(coupon_data.code)
            if code != db_coupon.code:
                CouponService._validate_code(db, code)
                db_coupon.code = code

        # Compute final fields then validate
        final_type = coupon_data.discount_type if coupon_data.discount_type is not None else db_coupon.discount_type
        final_value = coupon_data.discount_value if coupon_data.discount_value is not None else db_coupon.discount_value
        CouponService._validate_discount(final_type, final_value)
        db_coupon.discount_type = final_type
        db_coupon.discount_value = final_value

        now = utcnow()
        start_date = as_naive_utc(coupon_data.start_date)
        end_date = as_naive_utc(coupon_data.end_date)
        CouponService._validate_dates(
            start_date,
            end_date,
            now,
            final_start=start_date or db_coupon.start_date,
            final_end=end_date or db_coupon.end_date,
        )
        if start_date is not None:
            db_coupon.start_date = start_date
        if end_date is not None:
            db_coupon.end_date = end_date

        if coupon_data.max_discount is not None:
            db_coupon.max_discount = coupon_data.max_discount
        if coupon_data.min_purchase is not None:
            db_coupon.min_purchase = coupon_data.min_purchase
        if coupon_data.usage_limit is not None:
            db_coupon.usage_limit = coupon_data.usage_limit
        if coupon_data.description is not None:
            db_coupon.description = coupon_data.description
        if coupon_data.is_active is not None:
            db_coupon.is_active = coupon_data.is_active
        if start_date is not None and start_date > now:
            db_coupon.is_active = False
        if coupon_data.applicable_services is not None:
            db_coupon.applicable_services = CouponService._load_services(db, coupon_data.applicable_services)
        if coupon_data.applicable_specialties is not None:
            db_coupon.applicable_specialties = CouponService._load_specialties(db, coupon_data.applicable_specialties)
        db_coupon.updated_by_id = updated_by_id

        db.commit()
        db.refresh(db_coupon)
        return db_coupon

    @staticmethod
    def delete_coupon(db: Session, coupon_id: int) -> Optional[str]:
        """Returns 'deactivated' for used coupons, 'deleted' otherwise, None if missing."""
        db_coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
        if not db_coupon:
            return None
        if db_coupon.used_count > 0:
            db_coupon.is_active = False
            db.commit()
            logger.info("Coupon %s deactivated (used %d times)", db_coupon.code, db_coupon.used_count)
            return "deactivated"
        db.delete(db_coupon)
        db.commit()
        logger.info("Coupon %s deleted", db_coupon.code)
        return "deleted"

    @staticmethod
    def increment_redemption(db: Session, coupon_id: int) -> None:
        """Counts one redemption without committing; the caller owns the transaction."""
        db.execute(
            update(Coupon)
            .where(Coupon.id == coupon_id)
            .values(used_count=Coupon.used_count + 1)
        )

    @staticmethod
    def find_redeemable(
        db: Session,
        code: str,
        amount: Optional[float] = None,
        service_id: Optional[int] = None,
        specialty_id: Optional[int] = None,
    ) -> Coupon:
        coupon = db.query(Coupon).filter(Coupon.code == normalize_code(code), Coupon.is_active == True).first()
        if not coupon:
            raise NotFoundError("Coupon is invalid or does not exist")
        CouponService.ensure_redeemable(coupon)

        if amount and coupon.min_purchase > 0 and amount < coupon.min_purchase:
            raise BelowMinimumError(
                f"Minimum order value of {format_currency(coupon.min_purchase, settings.currency)} "
                f"is required to use this coupon"
            )
        CouponService.ensure_in_scope(coupon, service_id, specialty_id)
        return coupon

    @staticmethod
    def validate_coupon(
        db: Session,
        code: str,
        amount: Optional[float] = None,
        service_id: Optional[int] = None,
        specialty_id: Optional[int] = None,
    ) -> dict:
        coupon = CouponService.find_redeemable(db, code, amount, service_id, specialty_id)

        discount_amount, final_amount = 0.0, 0.0
        if amount:
            discount_amount, final_amount = DiscountCalculator.apply(
                amount, coupon.discount_type, coupon.discount_value, coupon.max_discount
            )
        return {
            "code": coupon.code,
            "discount_type": coupon.discount_type,
            "discount_value": coupon.discount_value,
            "max_discount": coupon.max_discount,
            "original_amount": amount or 0,
            "discount_amount": discount_amount,
            "final_amount": final_amount,
        }

    @staticmethod
    def ensure_redeemable(coupon: Coupon) -> None:
        now = utcnow()
        if coupon.is_expired_at(now):
            if coupon.start_date is not None and now < coupon.start_date:
                raise CouponExpiredError("Coupon is not active yet")
            raise CouponExpiredError("Coupon has expired")
        if coupon.is_limit_reached():
            raise LimitReachedError("Coupon usage limit has been reached")

    @staticmethod
    def ensure_in_scope(coupon: Coupon, service_id: Optional[int], specialty_id: Optional[int]) -> None:
        if coupon.applicable_services:
            if service_id is None:
                raise ServiceNotApplicableError("Please select a service before applying this coupon")
            if service_id not in coupon.applicable_service_ids:
                raise ServiceNotApplicableError("This coupon does not apply to the selected service")
        if coupon.applicable_specialties:
            if specialty_id is None:
                raise SpecialtyNotApplicableError("Please select a specialty before applying this coupon")
            if specialty_id not in coupon.applicable_specialty_ids:
                raise SpecialtyNotApplicableError("This coupon does not apply to the selected specialty")

    @staticmethod
    def _validate_code(db: Session, code: str) -> None:
        if not CODE_PATTERN.match(code):
            raise BadRequestError("Coupon code must be 3-15 characters of uppercase letters and digits")
        if db.query(Coupon.id).filter(Coupon.code == code).first():
            raise ConflictError("This coupon code already exists")

    @staticmethod
    def _validate_discount(discount_type: str, discount_value: float) -> None:
        if discount_type not in ("percentage", "fixed"):
            raise BadRequestError("discount_type must be 'percentage' or 'fixed'")
        if discount_type == "percentage" and (discount_value <= 0 or discount_value > 100):
            raise BadRequestError("Percentage discount must be greater than 0 and at most 100")
        if discount_type == "fixed" and discount_value <= 0:
            raise BadRequestError("Fixed discount must be greater than 0")

    @staticmethod
    def _validate_dates(start_date, end_date, now, final_start=None, final_end=None) -> None:
        if end_date is not None and end_date < now:
            raise BadRequestError("End date cannot be in the past")
        start = final_start if final_start is not None else start_date
        end = final_end if final_end is not None else end_date
        if start is not None and end is not None and start >= end:
            raise BadRequestError("Start date must be before end date")

    @staticmethod
    def _load_services(db: Session, service_ids: List[int]) -> List[Service]:
        services = []
        for service_id in dict.fromkeys(service_ids):
            service = db.query(Service).filter(Service.id == service_id).first()
            if not service:
                raise NotFoundError(f"Service with id {service_id} not found")
            services.append(service)
        return services

    @staticmethod
    def _load_specialties(db: Session, specialty_ids: List[int]) -> List[Specialty]:
        specialties = []
        for specialty_id in dict.fromkeys(specialty_ids):
            specialty = db.query(Specialty).filter(Specialty.id == specialty_id).first()
            if not specialty:
                raise NotFoundError(f"Specialty with id {specialty_id} not found")
            specialties.append(specialty)
        return specialties
