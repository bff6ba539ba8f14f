from pydantic import Field
from typing import Optional
from datetime import datetime
from hospital_booking.schemas.common import CamelModel

CATEGORY_PATTERN = r"^(pain-relief|gastrointestinal|antibiotic|antiviral|antihistamine|cardiovascular|respiratory|neurological|other)$"
UNIT_PATTERN = r"^(pill|bottle|package|patch|cream|inhaler|injection|other)$"


class MedicationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: str = Field(..., pattern=CATEGORY_PATTERN)
    default_dosage: Optional[str] = None
    default_usage: Optional[str] = None
    default_duration: Optional[str] = None
    side_effects: Optional[str] = None
    contraindications: Optional[str] = None
    manufacturer: Optional[str] = None
    unit_type: str = Field(default="pill", pattern=UNIT_PATTERN)
    unit_type_display: str = "pill"
    stock_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)


class MedicationUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, pattern=CATEGORY_PATTERN)
    default_dosage: Optional[str] = None
    default_usage: Optional[str] = None
    default_duration: Optional[str] = None
    side_effects: Optional[str] = None
    contraindications: Optional[str] = None
    manufacturer: Optional[str] = None
    unit_type: Optional[str] = Field(default=None, pattern=UNIT_PATTERN)
    unit_type_display: Optional[str] = None
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class StockAdjustment(CamelModel):
    """Positive delta restocks, negative delta dispenses."""

    delta: int


class MedicationResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = ""
    category: str
    default_dosage: Optional[str] = None
    default_usage: Optional[str] = None
    default_duration: Optional[str] = None
    side_effects: Optional[str] = None
    contraindications: Optional[str] = None
    manufacturer: Optional[str] = None
    unit_type: str
    unit_type_display: str
    stock_quantity: int
    low_stock_threshold: int
    is_active: bool
    created_at: datetime
