from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from hospital_booking.database import Base, utcnow


class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # at most one record per visit
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"), unique=True)
    diagnosis = Column(Text, nullable=False)
    symptoms = Column(Text, default="")
    treatment = Column(Text, default="")
    notes = Column(Text, default="")
    follow_up_date = Column(Date)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("User", foreign_keys=[doctor_id])
    appointment = relationship("Appointment")
    prescriptions = relationship(
        "PrescriptionItem", back_populates="record",
        cascade="all, delete-orphan", order_by="PrescriptionItem.id",
    )

    __table_args__ = (
        Index("ix_medical_records_patient", "patient_id", "created_at"),
        Index("ix_medical_records_doctor", "doctor_id", "created_at"),
    )


class PrescriptionItem(Base):
    __tablename__ = "prescription_items"

    id = Column(Integer, primary_key=True, index=True)
    record_id = Column(Integer, ForeignKey("medical_records.id", ondelete="CASCADE"), nullable=False, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id", ondelete="SET NULL"))
    medicine = Column(String(200), nullable=False)
    dosage = Column(String(200), default="")
    usage = Column(String(200), default="")
    frequency = Column(String(100), default="")
    duration = Column(String(100), default="")
    quantity = Column(Integer, default=1, nullable=False)
    notes = Column(Text, default="")

    record = relationship("MedicalRecord", back_populates="prescriptions")
