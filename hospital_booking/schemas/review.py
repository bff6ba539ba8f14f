from pydantic import Field
from typing import Optional
from datetime import datetime
from hospital_booking.schemas.common import CamelModel
from hospital_booking.schemas.user import UserSummary


class ReviewCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(default="", max_length=2000)
    appointment_id: Optional[int] = None


class ReviewResponse(CamelModel):
    id: int
    user_id: int
    hospital_id: int
    appointment_id: Optional[int] = None
    rating: int
    comment: Optional[str] = ""
    type: str
    created_at: datetime
    user: Optional[UserSummary] = None
