import logging
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from hospital_booking.errors import BadRequestError, NotFoundError
from hospital_booking.models.medication import Medication
from hospital_booking.schemas.medication import MedicationCreate, MedicationUpdate

logger = logging.getLogger(__name__)


class MedicationService:
    """Medication catalogue and stock levels"""

    @staticmethod
    def create(db: Session, data: MedicationCreate, created_by_id: Optional[int] = None) -> Medication:
        medication = Medication(**data.model_dump(), created_by_id=created_by_id)
        db.add(medication)
        db.commit()
        db.refresh(medication)
        return medication

    @staticmethod
    def get(db: Session, medication_id: int) -> Medication:
        medication = db.query(Medication).filter(Medication.id == medication_id).first()
        if not medication:
            raise NotFoundError("Medication not found")
        return medication

    @staticmethod
    def list_medications(
        db: Session,
        search: Optional[str] = None,
        category: Optional[str] = None,
        include_inactive: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Medication], int]:
        limit = min(max(limit, 1), 500)
        page = max(page, 1)
        q = db.query(Medication)
        if not include_inactive:
            q = q.filter(Medication.is_active == True)
        if search:
            q = q.filter(Medication.name.ilike(f"%{search.strip()}%"))
        if category:
            q = q.filter(Medication.category == category)
        total = q.count()
        return q.order_by(Medication.name, Medication.id).offset((page - 1) * limit).limit(limit).all(), total

    @staticmethod
    def update(db: Session, medication_id: int, data: MedicationUpdate) -> Medication:
        medication = MedicationService.get(db, medication_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(medication, field, value)
        db.commit()
        db.refresh(medication)
        return medication

    @staticmethod
    def adjust_stock(db: Session, medication_id: int, delta: int) -> Medication:
        if delta < 0:
            return MedicationService.reduce_stock(db, medication_id, -delta)
        medication = MedicationService.get(db, medication_id)
        medication.stock_quantity += delta
        db.commit()
        db.refresh(medication)
        return medication

    @staticmethod
    def reduce_stock(db: Session, medication_id: int, quantity: int) -> Medication:
        medication = MedicationService.get(db, medication_id)
        if medication.stock_quantity < quantity:
            raise BadRequestError(
                f"Insufficient stock. Only {medication.stock_quantity} {medication.unit_type_display} left."
            )
        medication.stock_quantity -= quantity
        db.commit()
        db.refresh(medication)
        if medication.stock_quantity <= medication.low_stock_threshold:
            logger.warning("Medication %s is low on stock (%d)", medication.name, medication.stock_quantity)
        return medication

    @staticmethod
    def low_stock(db: Session) -> List[Medication]:
        return (
            db.query(Medication)
            .filter(Medication.is_active == True, Medication.stock_quantity <= Medication.low_stock_threshold)
            .order_by(Medication.stock_quantity, Medication.name)
            .all()
        )

    @staticmethod
    def deactivate(db: Session, medication_id: int) -> None:
        medication = MedicationService.get(db, medication_id)
        medication.is_active = False
        db.commit()
