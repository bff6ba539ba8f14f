from sqlalchemy import Column, Integer, String, Enum, Boolean, DateTime, ForeignKey, Text, JSON, Index
from hospital_booking.database import Base, utcnow

NotificationTypes = (
    "appointment_create", "appointment_update", "appointment_cancel",
    "appointment_reminder", "payment", "medical_record", "system",
)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    recipient_role = Column(String(20), index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(Enum(*NotificationTypes, name="notification_type"), nullable=False, index=True)
    data = Column(JSON)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("ix_notifications_recipient_read", "recipient_id", "is_read"),
    )
