from sqlalchemy import Column, Integer, String, Enum, DateTime, Float, ForeignKey, JSON
from sqlalchemy.orm import relationship
from hospital_booking.database import Base, utcnow

GatewayMethods = ("paypal", "momo")
PaymentRecordStatuses = ("pending", "completed", "failed", "refunded")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    method = Column(Enum(*GatewayMethods, name="gateway_method"), nullable=False)
    transaction_id = Column(String(64), unique=True, nullable=False)
    status = Column(Enum(*PaymentRecordStatuses, name="payment_record_status"), default="pending", nullable=False, index=True)
    gateway_response = Column(JSON)
    paid_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    appointment = relationship("Appointment")
