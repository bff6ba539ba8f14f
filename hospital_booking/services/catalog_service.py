from sqlalchemy.orm import Session
from typing import List, Optional
from hospital_booking.errors import ConflictError, NotFoundError
from hospital_booking.models.catalog import Hospital, Service, Specialty
from hospital_booking.models.user import User
from hospital_booking.schemas.catalog import (
    HospitalCreate, HospitalUpdate, ServiceCreate, ServiceUpdate, SpecialtyCreate,
)


def _apply(instance, changes: dict):
    for field, value in changes.items():
        setattr(instance, field, value)


class CatalogService:
    """Hospitals (branches), specialties, services and doctor listings"""

    @staticmethod
    def list_hospitals(db: Session, include_inactive: bool = False) -> List[Hospital]:
        q = db.query(Hospital)
        if not include_inactive:
            q = q.filter(Hospital.is_active == True)
        return q.order_by(Hospital.name).all()

    @staticmethod
    def get_hospital(db: Session, hospital_id: int) -> Hospital:
        hospital = db.query(Hospital).filter(Hospital.id == hospital_id).first()
        if not hospital:
            raise NotFoundError("Hospital not found")
        return hospital

    @staticmethod
    def create_hospital(db: Session, data: HospitalCreate) -> Hospital:
        hospital = Hospital(**data.model_dump())
        db.add(hospital)
        db.commit()
        db.refresh(hospital)
        return hospital

    @staticmethod
    def update_hospital(db: Session, hospital_id: int, data: HospitalUpdate) -> Hospital:
        hospital = CatalogService.get_hospital(db, hospital_id)
        _apply(hospital, data.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(hospital)
        return hospital

    @staticmethod
    def list_specialties(db: Session) -> List[Specialty]:
        return db.query(Specialty).filter(Specialty.is_active == True).order_by(Specialty.name).all()

    @staticmethod
    def create_specialty(db: Session, data: SpecialtyCreate) -> Specialty:
        if db.query(Specialty.id).filter(Specialty.name == data.name).first():
            raise ConflictError("Specialty already exists")
        specialty = Specialty(**data.model_dump())
        db.add(specialty)
        db.commit()
        db.refresh(specialty)
        return specialty

    @staticmethod
    def list_services(db: Session, specialty_id: Optional[int] = None) -> List[Service]:
        q = db.query(Service).filter(Service.is_active == True)
        if specialty_id is not None:
            q = q.filter(Service.specialty_id == specialty_id)
        return q.order_by(Service.name).all()

    @staticmethod
    def get_service(db: Session, service_id: int) -> Service:
        service = db.query(Service).filter(Service.id == service_id).first()
        if not service:
            raise NotFoundError("Service not found")
        return service

    @staticmethod
    def create_service(db: Session, data: ServiceCreate) -> Service:
        if not db.query(Specialty.id).filter(Specialty.id == data.specialty_id).first():
            raise NotFoundError("Specialty not found")
        service = Service(**data.model_dump())
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service_id: int, data: ServiceUpdate) -> Service:
        service = CatalogService.get_service(db, service_id)
        _apply(service, data.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def list_doctors(db: Session, hospital_id: Optional[int] = None, specialty_id: Optional[int] = None) -> List[User]:
        q = db.query(User).filter(User.role_type == "doctor", User.is_locked == False)
        if hospital_id is not None:
            q = q.filter(User.hospital_id == hospital_id)
        if specialty_id is not None:
            q = q.filter(User.specialty_id == specialty_id)
        return q.order_by(User.full_name).all()
