from pydantic import Field, model_validator
from typing import List, Optional
from datetime import date, datetime
from hospital_booking.schemas.common import CamelModel
from hospital_booking.schemas.user import UserSummary


class PrescriptionItemIn(CamelModel):
    """A catalogue medication (``medicationId``) or a free-text ``medicine``."""

    medication_id: Optional[int] = None
    medicine: Optional[str] = Field(default=None, max_length=200)
    dosage: Optional[str] = None
    usage: Optional[str] = None
    frequency: str = ""
    duration: Optional[str] = None
    quantity: int = Field(default=1, ge=1)
    notes: str = ""

    @model_validator(mode="after")
    def names_a_medicine(self):
        if self.medication_id is None and not (self.medicine or "").strip():
            raise ValueError("Either medicationId or medicine is required")
        return self


class MedicalRecordCreate(CamelModel):
    patient_id: Optional[int] = None
    appointment_id: Optional[int] = None
    diagnosis: str = Field(..., min_length=1)
    symptoms: str = ""
    treatment: str = ""
    notes: str = ""
    follow_up_date: Optional[date] = None
    prescriptions: List[PrescriptionItemIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def has_patient(self):
        if self.patient_id is None and self.appointment_id is None:
            raise ValueError("Either patientId or appointmentId is required")
        return self


class MedicalRecordUpdate(CamelModel):
    diagnosis: Optional[str] = Field(default=None, min_length=1)
    symptoms: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    follow_up_date: Optional[date] = None
    # replaces the whole list when present
    prescriptions: Optional[List[PrescriptionItemIn]] = None


class PrescriptionItemResponse(CamelModel):
    id: int
    medication_id: Optional[int] = None
    medicine: str
    dosage: Optional[str] = ""
    usage: Optional[str] = ""
    frequency: Optional[str] = ""
    duration: Optional[str] = ""
    quantity: int
    notes: Optional[str] = ""


class MedicalRecordResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_id: Optional[int] = None
    diagnosis: str
    symptoms: Optional[str] = ""
    treatment: Optional[str] = ""
    notes: Optional[str] = ""
    follow_up_date: Optional[date] = None
    prescriptions: List[PrescriptionItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class MedicalRecordDetail(MedicalRecordResponse):
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None
