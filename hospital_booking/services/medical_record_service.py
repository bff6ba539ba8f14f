import logging
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from hospital_booking.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from hospital_booking.models.appointment import Appointment
from hospital_booking.models.medical_record import MedicalRecord, PrescriptionItem
from hospital_booking.models.user import User
from hospital_booking.schemas.medical_record import MedicalRecordCreate, MedicalRecordUpdate, PrescriptionItemIn
from hospital_booking.services.appointment_service import AppointmentService
from hospital_booking.services.medication_service import MedicationService
from hospital_booking.services.notification_service import NotificationService
from hospital_booking.services.user_service import UserService

logger = logging.getLogger(__name__)

RECORDABLE_STATUSES = ("confirmed", "completed")


class MedicalRecordService:
    """Diagnoses and prescriptions written by doctors, read by their patients"""

    @staticmethod
    def create(db: Session, doctor: User, data: MedicalRecordCreate) -> MedicalRecord:
        """Write a record, optionally for a visit.

        A record written for a confirmed appointment completes it. Without an
        appointment the doctor must have seen the patient before.
        """
        appointment = None
        if data.appointment_id is not None:
            appointment = AppointmentService.get_appointment(db, data.appointment_id)
            if doctor.role_type != "admin" and appointment.doctor_id != doctor.id:
                raise NotFoundError("Appointment not found or you are not its doctor")
            if data.patient_id is not None and data.patient_id != appointment.patient_id:
                raise BadRequestError("The patient does not match the appointment")
            if appointment.status not in RECORDABLE_STATUSES:
                raise BadRequestError(f"A {appointment.status} appointment cannot have a medical record")
            if db.query(MedicalRecord.id).filter(MedicalRecord.appointment_id == appointment.id).first():
                raise ConflictError("This appointment already has a medical record")
            patient_id = appointment.patient_id
        else:
            patient_id = UserService.get_user(db, data.patient_id).id
            if doctor.role_type != "admin" and not (
                db.query(Appointment.id)
                .filter(Appointment.patient_id == patient_id, Appointment.doctor_id == doctor.id)
                .first()
            ):
                raise ForbiddenError("You can only write records for your own patients")

        record = MedicalRecord(
            patient_id=patient_id,
            doctor_id=appointment.doctor_id if appointment is not None else doctor.id,
            appointment_id=appointment.id if appointment is not None else None,
            diagnosis=data.diagnosis,
            symptoms=data.symptoms,
            treatment=data.treatment,
            notes=data.notes,
            follow_up_date=data.follow_up_date,
            prescriptions=MedicalRecordService._prescriptions(db, data.prescriptions),
        )
        db.add(record)
        if appointment is not None:
            if appointment.can_transition_to("completed"):
                appointment.status = "completed"
            if not appointment.diagnosis:
                appointment.diagnosis = data.diagnosis
        NotificationService.notify(
            db,
            title="New medical record",
            message="Your doctor has added a medical record to your history",
            type="medical_record",
            recipient_id=patient_id,
            data={"appointmentId": record.appointment_id},
        )
        db.commit()
        db.refresh(record)
        logger.info("Medical record %s written by %s for patient %s", record.id, doctor.id, patient_id)
        return record

    @staticmethod
    def update(db: Session, user: User, record_id: int, data: MedicalRecordUpdate) -> MedicalRecord:
        record = MedicalRecordService.get_record(db, record_id)
        if user.role_type != "admin" and record.doctor_id != user.id:
            raise ForbiddenError("Only the doctor who wrote this record can change it")
        changes = data.model_dump(exclude_unset=True, exclude={"prescriptions"})
        for field, value in changes.items():
            if value is not None:
                setattr(record, field, value)
        if data.prescriptions is not None:
            record.prescriptions = MedicalRecordService._prescriptions(db, data.prescriptions)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def get_record(db: Session, record_id: int) -> MedicalRecord:
        record = (
            db.query(MedicalRecord)
            .filter(MedicalRecord.id == record_id, MedicalRecord.is_active == True)
            .first()
        )
        if not record:
            raise NotFoundError("Medical record not found")
        return record

    @staticmethod
    def get_for_user(db: Session, user: User, record_id: int) -> MedicalRecord:
        record = MedicalRecordService.get_record(db, record_id)
        if user.role_type != "admin" and user.id not in (record.patient_id, record.doctor_id):
            raise ForbiddenError("You do not have access to this medical record")
        return record

    @staticmethod
    def list_for_user(db: Session, user: User, page: int = 1, limit: int = 10) -> Tuple[List[MedicalRecord], int]:
        """Patients see their history, doctors the records they wrote, admins everything."""
        q = db.query(MedicalRecord).filter(MedicalRecord.is_active == True)
        if user.role_type == "doctor":
            q = q.filter(MedicalRecord.doctor_id == user.id)
        elif user.role_type != "admin":
            q = q.filter(MedicalRecord.patient_id == user.id)
        return MedicalRecordService._page(q, page, limit)

    @staticmethod
    def list_for_patient(db: Session, user: User, patient_id: int) -> List[MedicalRecord]:
        UserService.get_user(db, patient_id)
        q = db.query(MedicalRecord).filter(MedicalRecord.patient_id == patient_id, MedicalRecord.is_active == True)
        if user.role_type != "admin":
            q = q.filter(MedicalRecord.doctor_id == user.id)
        return q.order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc()).all()

    @staticmethod
    def _prescriptions(db: Session, items: List[PrescriptionItemIn]) -> List[PrescriptionItem]:
        """Catalogue medications fill in their default name, dosage, usage and duration."""
        prescriptions = []
        for item in items:
            medicine, dosage, usage, duration = item.medicine, item.dosage, item.usage, item.duration
            if item.medication_id is not None:
                medication = MedicationService.get(db, item.medication_id)
                if not medication.is_active:
                    raise BadRequestError(f"{medication.name} is no longer available")
                medicine = medicine or medication.name
                dosage = dosage if dosage is not None else medication.default_dosage
                usage = usage if usage is not None else medication.default_usage
                duration = duration if duration is not None else medication.default_duration
            prescriptions.append(PrescriptionItem(
                medication_id=item.medication_id,
                medicine=medicine.strip(),
                dosage=dosage or "",
                usage=usage or "",
                frequency=item.frequency,
                duration=duration or "",
                quantity=item.quantity,
                notes=item.notes,
            ))
        return prescriptions

    @staticmethod
    def _page(q, page: int, limit: int) -> Tuple[List[MedicalRecord], int]:
        total = q.count()
        items = (
            q.order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total
