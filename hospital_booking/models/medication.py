from sqlalchemy import Column, Integer, String, Enum, Boolean, DateTime, ForeignKey, Text, CheckConstraint
from hospital_booking.database import Base, utcnow

MedicationCategories = (
    "pain-relief", "gastrointestinal", "antibiotic", "antiviral", "antihistamine",
    "cardiovascular", "respiratory", "neurological", "other",
)
UnitTypes = ("pill", "bottle", "package", "patch", "cream", "inhaler", "injection", "other")


class Medication(Base):
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, default="")
    category = Column(Enum(*MedicationCategories, name="medication_category"), nullable=False, index=True)
    default_dosage = Column(String(200))
    default_usage = Column(String(200))
    default_duration = Column(String(100))
    side_effects = Column(Text)
    contraindications = Column(Text)
    manufacturer = Column(String(200))
    unit_type = Column(Enum(*UnitTypes, name="unit_type"), default="pill", nullable=False)
    unit_type_display = Column(String(50), default="pill", nullable=False)
    stock_quantity = Column(Integer, default=0, nullable=False)
    low_stock_threshold = Column(Integer, default=10, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_medications_stock_non_negative"),
    )
