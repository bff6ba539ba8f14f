from pydantic import Field
from typing import Optional
from hospital_booking.schemas.common import CamelModel


class HospitalCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=300)
    phone_number: Optional[str] = None
    email: Optional[str] = None
    description: str = ""
    image_url: Optional[str] = None


class HospitalUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    address: Optional[str] = Field(default=None, min_length=1, max_length=300)
    phone_number: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class HospitalResponse(CamelModel):
    id: int
    name: str
    address: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = ""
    image_url: Optional[str] = None
    is_active: bool
    average_rating: float
    review_count: int


class SpecialtyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""


class SpecialtyResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = ""
    is_active: bool


class ServiceCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: float = Field(..., ge=0)
    duration: int = Field(default=30, ge=10)
    specialty_id: int


class ServiceUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, ge=10)
    is_active: Optional[bool] = None


class ServiceResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = ""
    price: float
    duration: int
    specialty_id: int
    is_active: bool
