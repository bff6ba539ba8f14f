from sqlalchemy import Column, Integer, String, Enum, Boolean, Date, DateTime, Float, ForeignKey, Table, Text
from sqlalchemy.orm import relationship
from hospital_booking.database import Base, utcnow

RoleTypes = ("user", "doctor", "admin")
Genders = ("male", "female", "other")

role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Permission(Base):
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, default="")
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(32), unique=True, nullable=False)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, default="")
    active = Column(Boolean, default=True, nullable=False)
    permissions = relationship("Permission", secondary=role_permissions, lazy="selectin")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(20))
    password_hash = Column(String(255), nullable=False)
    gender = Column(Enum(*Genders, name="gender"))
    date_of_birth = Column(Date)
    address = Column(String(200))
    role_type = Column(Enum(*RoleTypes, name="role_type"), default="user", nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="SET NULL"))
    avatar_url = Column(String(500))
    avatar_public_id = Column(String(255))
    is_verified = Column(Boolean, default=False, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)

    # doctor profile
    hospital_id = Column(Integer, ForeignKey("hospitals.id", ondelete="SET NULL"))
    specialty_id = Column(Integer, ForeignKey("specialties.id", ondelete="SET NULL"))
    consultation_fee = Column(Float, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    role = relationship("Role", lazy="joined")
    hospital = relationship("Hospital")
    specialty = relationship("Specialty")
