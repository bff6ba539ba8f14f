from datetime import datetime
from sqlalchemy import Column, Integer, String, Enum, Boolean, DateTime, Float, ForeignKey, Table, Text, Index
from sqlalchemy.orm import relationship
from hospital_booking.database import Base, utcnow

DiscountTypes = ("percentage", "fixed")

coupon_services = Table(
    "coupon_services",
    Base.metadata,
    Column("coupon_id", Integer, ForeignKey("coupons.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
)

coupon_specialties = Table(
    "coupon_specialties",
    Base.metadata,
    Column("coupon_id", Integer, ForeignKey("coupons.id", ondelete="CASCADE"), primary_key=True),
    Column("specialty_id", Integer, ForeignKey("specialties.id", ondelete="CASCADE"), primary_key=True),
)


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(15), unique=True, nullable=False, index=True)
    description = Column(Text, default="")
    discount_type = Column(Enum(*DiscountTypes, name="discount_type"), default="percentage", nullable=False)
    discount_value = Column(Float, nullable=False)
    max_discount = Column(Float, nullable=True)
    min_purchase = Column(Float, default=0, nullable=False)
    start_date = Column(DateTime, default=utcnow, nullable=False)
    end_date = Column(DateTime, nullable=True)
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    applicable_services = relationship("Service", secondary=coupon_services, lazy="selectin")
    applicable_specialties = relationship("Specialty", secondary=coupon_specialties, lazy="selectin")

    __table_args__ = (
        Index("ix_coupons_active_type", "is_active", "discount_type"),
    )

    def is_expired_at(self, moment: datetime) -> bool:
        """Outside the [start_date, end_date] window; both bounds are inclusive."""
        if self.start_date is not None and moment < self.start_date:
            return True
        return self.end_date is not None and moment > self.end_date

    def is_limit_reached(self) -> bool:
        return self.usage_limit is not None and (self.used_count or 0) >= self.usage_limit

    def is_valid_at(self, moment: datetime) -> bool:
        return bool(self.is_active) and not self.is_expired_at(moment) and not self.is_limit_reached()

    @property
    def is_valid(self) -> bool:
        return self.is_valid_at(utcnow())

    @property
    def applicable_service_ids(self):
        return [s.id for s in self.applicable_services]

    @property
    def applicable_specialty_ids(self):
        return [s.id for s in self.applicable_specialties]
