from sqlalchemy import Column, Integer, String, Enum, Boolean, Date, DateTime, Float, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from hospital_booking.database import Base, utcnow

AppointmentStatuses = ("pending", "confirmed", "completed", "cancelled", "rescheduled", "no-show")
PaymentStatuses = ("unpaid", "pending", "completed", "refunded")
PaymentMethods = ("cash", "paypal", "momo")

TERMINAL_STATUSES = ("completed", "cancelled", "no-show")

# status -> statuses reachable from it
STATUS_TRANSITIONS = {
    "pending": ("confirmed", "cancelled", "rescheduled", "no-show"),
    "confirmed": ("completed", "cancelled", "no-show"),
    "rescheduled": ("confirmed", "cancelled", "rescheduled", "no-show"),
    "completed": (),
    "cancelled": (),
    "no-show": (),
}


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    hospital_id = Column(Integer, ForeignKey("hospitals.id", ondelete="RESTRICT"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"))
    specialty_id = Column(Integer, ForeignKey("specialties.id", ondelete="SET NULL"))
    room = Column(String(50))

    appointment_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    status = Column(Enum(*AppointmentStatuses, name="appointment_status"), default="pending", nullable=False, index=True)
    payment_status = Column(Enum(*PaymentStatuses, name="payment_status"), default="unpaid", nullable=False)
    payment_method = Column(Enum(*PaymentMethods, name="payment_method"), default="cash", nullable=False)

    consultation_fee = Column(Float, default=0, nullable=False)
    additional_fees = Column(Float, default=0, nullable=False)
    discount = Column(Float, default=0, nullable=False)
    total_amount = Column(Float, default=0, nullable=False)
    coupon_id = Column(Integer, ForeignKey("coupons.id", ondelete="SET NULL"))

    reschedule_count = Column(Integer, default=0, nullable=False)
    cancellation_reason = Column(Text)
    cancelled_at = Column(DateTime)

    symptoms = Column(Text, default="")
    notes = Column(Text, default="")
    doctor_notes = Column(Text)
    diagnosis = Column(Text)
    is_reviewed = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("User", foreign_keys=[doctor_id])
    hospital = relationship("Hospital")
    service = relationship("Service")
    coupon = relationship("Coupon")
    reschedule_history = relationship(
        "RescheduleHistory", back_populates="appointment",
        cascade="all, delete-orphan", order_by="RescheduleHistory.id",
    )

    __table_args__ = (
        Index("ix_appointments_patient_date", "patient_id", "appointment_date"),
        Index("ix_appointments_doctor_date", "doctor_id", "appointment_date"),
        Index("ix_appointments_hospital_date", "hospital_id", "appointment_date"),
    )

    def can_transition_to(self, status: str) -> bool:
        return status in STATUS_TRANSITIONS.get(self.status, ())


class RescheduleHistory(Base):
    __tablename__ = "reschedule_history"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True)
    old_date = Column(Date, nullable=False)
    old_start_time = Column(String(5), nullable=False)
    old_end_time = Column(String(5), nullable=False)
    new_date = Column(Date, nullable=False)
    new_start_time = Column(String(5), nullable=False)
    new_end_time = Column(String(5), nullable=False)
    rescheduled_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    notes = Column(Text, default="")
    created_at = Column(DateTime, default=utcnow, nullable=False)

    appointment = relationship("Appointment", back_populates="reschedule_history")
