from pydantic import Field
from typing import List, Optional
from datetime import datetime
from hospital_booking.schemas.common import CamelModel


# Request schemas
class CouponCreate(CamelModel):
    code: str = Field(..., min_length=1, description="3-15 uppercase letters or digits")
    discount_type: str = Field(..., description="'percentage' or 'fixed'")
    discount_value: float = Field(..., description="Percent (0-100] or fixed amount")
    max_discount: Optional[float] = Field(default=None, ge=0, description="Cap for percentage coupons")
    min_purchase: float = Field(default=0, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: str = ""
    usage_limit: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = Field(default=True)
    applicable_services: List[int] = Field(default_factory=list)
    applicable_specialties: List[int] = Field(default_factory=list)


class CouponUpdate(CamelModel):
    code: Optional[str] = None
    discount_type: Optional[str] = None
    discount_value: Optional[float] = None
    max_discount: Optional[float] = Field(default=None, ge=0)
    min_purchase: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[str] = None
    usage_limit: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None
    applicable_services: Optional[List[int]] = None
    applicable_specialties: Optional[List[int]] = None


class CouponValidateRequest(CamelModel):
    code: str = Field(..., min_length=1)
    amount: Optional[float] = Field(default=None, gt=0)
    service_id: Optional[int] = None
    specialty_id: Optional[int] = None


# Response schemas
class CouponResponse(CamelModel):
    id: int
    code: str
    description: str = ""
    discount_type: str
    discount_value: float
    max_discount: Optional[float] = None
    min_purchase: float
    start_date: datetime
    end_date: Optional[datetime] = None
    usage_limit: Optional[int] = None
    used_count: int
    is_active: bool
    is_valid: bool
    applicable_service_ids: List[int]
    applicable_specialty_ids: List[int]
    created_at: datetime


class CouponValidation(CamelModel):
    code: str
    discount_type: str
    discount_value: float
    max_discount: Optional[float] = None
    original_amount: float = 0
    discount_amount: float = 0
    final_amount: float = 0


class CouponInfo(CamelModel):
    code: str
    discount_type: str
    discount_value: float
    max_discount: Optional[float] = None
    min_purchase: float
    applicable_service_ids: List[int]
    applicable_specialty_ids: List[int]
    is_valid: bool
