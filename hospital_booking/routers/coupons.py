from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from hospital_booking.database import get_db
from hospital_booking.dependencies import get_current_user, require_permission
from hospital_booking.errors import NotFoundError
from hospital_booking.models.user import User
from hospital_booking.schemas.common import ApiResponse, MessageResponse, PaginatedResponse, paginate
from hospital_booking.schemas.coupon import (
    CouponCreate, CouponUpdate, CouponResponse, CouponValidateRequest, CouponValidation, CouponInfo,
)
from hospital_booking.services.coupon_service import CouponService

router = APIRouter(prefix="/api/coupons", tags=["coupons"])

manage_coupons = require_permission("manage_coupons")


@router.post("/validate", response_model=ApiResponse[CouponValidation])
def validate_coupon(
    payload: CouponValidateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = CouponService.validate_coupon(db, payload.code, payload.amount, payload.service_id, payload.specialty_id)
    return {"success": True, "data": result}


@router.get("/validate", response_model=ApiResponse[CouponInfo])
def get_coupon_info(
    code: str = Query(..., min_length=1),
    service_id: Optional[int] = Query(None, alias="serviceId"),
    specialty_id: Optional[int] = Query(None, alias="specialtyId"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    coupon = CouponService.find_redeemable(db, code, service_id=service_id, specialty_id=specialty_id)
    return {"success": True, "data": coupon}


@router.post("", response_model=ApiResponse[CouponResponse], status_code=201)
def create_coupon(coupon: CouponCreate, db: Session = Depends(get_db), admin: User = Depends(manage_coupons)):
    created = CouponService.create_coupon(db, coupon, created_by_id=admin.id)
    return {"success": True, "data": created, "message": "Coupon created"}


@router.get("", response_model=PaginatedResponse[CouponResponse])
def list_coupons(
    code: Optional[str] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    discount_type: Optional[str] = Query(None, alias="discountType"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    sort_by: str = Query("created_at", alias="sortBy"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    admin: User = Depends(manage_coupons),
):
    coupons, total = CouponService.get_coupons(db, code, is_active, discount_type, page, limit, sort_by, order)
    return paginate(coupons, total, page, limit)


@router.get("/{coupon_id}", response_model=ApiResponse[CouponResponse])
def get_coupon(coupon_id: int, db: Session = Depends(get_db), admin: User = Depends(manage_coupons)):
    c = CouponService.get_coupon(db, coupon_id)
    if not c:
        raise NotFoundError("Coupon not found")
    return {"success": True, "data": c}


@router.put("/{coupon_id}", response_model=ApiResponse[CouponResponse])
def update_coupon(
    coupon_id: int,
    payload: CouponUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(manage_coupons),
):
    updated = CouponService.update_coupon(db, coupon_id, payload, updated_by_id=admin.id)
    if not updated:
        raise NotFoundError("Coupon not found")
    return {"success": True, "data": updated, "message": "Coupon updated"}


@router.delete("/{coupon_id}", response_model=MessageResponse)
def delete_coupon(coupon_id: int, db: Session = Depends(get_db), admin: User = Depends(manage_coupons)):
    outcome = CouponService.delete_coupon(db, coupon_id)
    if not outcome:
        raise NotFoundError("Coupon not found")
    if outcome == "deactivated":
        return {"success": True, "message": "Coupon has been used, so it was deactivated instead of deleted"}
    return {"success": True, "message": "Coupon deleted"}
