from pydantic import Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime
from hospital_booking.schemas.common import CamelModel
from hospital_booking.schemas.user import UserSummary

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class TimeSlot(CamelModel):
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)

    @field_validator("start_time", "end_time")
    @classmethod
    def zero_pad(cls, v: str) -> str:
        hours, minutes = v.split(":")
        return f"{int(hours):02d}:{minutes}"

    @model_validator(mode="after")
    def start_before_end(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class AppointmentCreate(CamelModel):
    doctor_id: int
    hospital_id: int
    service_id: Optional[int] = None
    appointment_date: date
    time_slot: TimeSlot
    symptoms: str = ""
    notes: str = ""
    coupon_code: Optional[str] = None
    payment_method: str = Field(default="cash", pattern=r"^(cash|paypal|momo)$")


class CancelRequest(CamelModel):
    cancellation_reason: Optional[str] = None


class RescheduleRequest(CamelModel):
    appointment_date: date
    time_slot: TimeSlot
    notes: str = ""


class StatusUpdate(CamelModel):
    status: str = Field(..., pattern=r"^(confirmed|completed|no-show)$")
    doctor_notes: Optional[str] = None
    diagnosis: Optional[str] = None


class AppointmentReview(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class RescheduleHistoryResponse(CamelModel):
    old_date: date
    old_start_time: str
    old_end_time: str
    new_date: date
    new_start_time: str
    new_end_time: str
    rescheduled_by_id: Optional[int] = None
    notes: Optional[str] = ""
    created_at: datetime


class AppointmentResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    hospital_id: int
    service_id: Optional[int] = None
    specialty_id: Optional[int] = None
    room: Optional[str] = None
    appointment_date: date
    start_time: str
    end_time: str
    status: str
    payment_status: str
    payment_method: str
    consultation_fee: float
    additional_fees: float
    discount: float
    total_amount: float
    coupon_id: Optional[int] = None
    reschedule_count: int
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    symptoms: Optional[str] = ""
    notes: Optional[str] = ""
    doctor_notes: Optional[str] = None
    diagnosis: Optional[str] = None
    is_reviewed: bool
    created_at: datetime


class AppointmentDetail(AppointmentResponse):
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None
    reschedule_history: List[RescheduleHistoryResponse] = Field(default_factory=list)


class BookedSlot(CamelModel):
    start_time: str
    end_time: str
    status: str


class StatusCount(CamelModel):
    status: str
    count: int


class DailyCount(CamelModel):
    appointment_date: date
    count: int


class DoctorCount(CamelModel):
    doctor_id: int
    doctor_name: Optional[str] = None
    count: int


class AppointmentStats(CamelModel):
    status_stats: List[StatusCount]
    daily_stats: List[DailyCount]
    doctor_stats: List[DoctorCount]
