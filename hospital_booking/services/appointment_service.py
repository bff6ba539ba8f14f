import logging
from datetime import date, timedelta
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from hospital_booking.config import settings
from hospital_booking.database import utcnow
from hospital_booking.errors import (
    BadRequestError, ConflictError, ForbiddenError, InvalidTransitionError, LimitReachedError, NotFoundError,
)
from hospital_booking.models.appointment import Appointment, RescheduleHistory, TERMINAL_STATUSES
from hospital_booking.models.user import User
from hospital_booking.schemas.appointment import AppointmentCreate, RescheduleRequest, StatusUpdate
from hospital_booking.services.catalog_service import CatalogService
from hospital_booking.services.coupon_service import CouponService
from hospital_booking.services.discount_calculator import DiscountCalculator
from hospital_booking.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = ("pending", "confirmed", "rescheduled")


class AppointmentService:
    """Booking, cancellation, rescheduling and status changes of appointments"""

    @staticmethod
    def book(db: Session, patient: User, data: AppointmentCreate) -> Appointment:
        doctor = db.query(User).filter(User.id == data.doctor_id, User.role_type == "doctor").first()
        if not doctor:
            raise NotFoundError("Doctor not found")
        hospital = CatalogService.get_hospital(db, data.hospital_id)
        if not hospital.is_active:
            raise BadRequestError("Hospital is not accepting appointments")
        service = None
        if data.service_id is not None:
            service = CatalogService.get_service(db, data.service_id)
            if not service.is_active:
                raise BadRequestError("Service is not available")

        AppointmentService._ensure_future(data.appointment_date)
        AppointmentService._ensure_slot_free(db, doctor.id, data.appointment_date, data.time_slot.start_time)

        specialty_id = service.specialty_id if service is not None else doctor.specialty_id
        consultation_fee = doctor.consultation_fee or 0
        additional_fees = service.price if service is not None else 0
        subtotal = consultation_fee + additional_fees

        coupon = None
        discount = 0.0
        if data.coupon_code:
            coupon = CouponService.find_redeemable(
                db, data.coupon_code, subtotal, service.id if service is not None else None, specialty_id
            )
            if subtotal:
                discount, _ = DiscountCalculator.apply(
                    subtotal, coupon.discount_type, coupon.discount_value, coupon.max_discount
                )

        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            hospital_id=hospital.id,
            service_id=service.id if service is not None else None,
            specialty_id=specialty_id,
            appointment_date=data.appointment_date,
            start_time=data.time_slot.start_time,
            end_time=data.time_slot.end_time,
            payment_method=data.payment_method,
            consultation_fee=consultation_fee,
            additional_fees=additional_fees,
            discount=discount,
            total_amount=subtotal - discount,
            coupon_id=coupon.id if coupon is not None else None,
            symptoms=data.symptoms,
            notes=data.notes,
        )
        db.add(appointment)
        db.flush()
        NotificationService.notify(
            db,
            title="Appointment booked",
            message=f"Your appointment with {doctor.full_name} on {data.appointment_date.isoformat()} "
                    f"at {data.time_slot.start_time} has been booked",
            type="appointment_create",
            recipient_id=patient.id,
            data={"appointmentId": appointment.id},
        )
        NotificationService.notify(
            db,
            title="New appointment",
            message=f"{patient.full_name} booked {data.appointment_date.isoformat()} at {data.time_slot.start_time}",
            type="appointment_create",
            recipient_id=doctor.id,
            data={"appointmentId": appointment.id},
        )
        db.commit()
        db.refresh(appointment)
        logger.info("Appointment %s booked by patient %s with doctor %s", appointment.id, patient.id, doctor.id)
        return appointment

    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Appointment:
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    @staticmethod
    def get_for_user(db: Session, user: User, appointment_id: int) -> Appointment:
        appointment = AppointmentService.get_appointment(db, appointment_id)
        if user.role_type != "admin" and user.id not in (appointment.patient_id, appointment.doctor_id):
            raise ForbiddenError("You do not have access to this appointment")
        return appointment

    @staticmethod
    def list_for_user(
        db: Session, user: User, status: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Tuple[List[Appointment], int]:
        q = db.query(Appointment)
        if user.role_type == "doctor":
            q = q.filter(Appointment.doctor_id == user.id)
        elif user.role_type != "admin":
            q = q.filter(Appointment.patient_id == user.id)
        if status:
            q = q.filter(Appointment.status == status)
        return AppointmentService._page(q, page, limit)

    @staticmethod
    def list_all(
        db: Session,
        status: Optional[str] = None,
        doctor_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Appointment], int]:
        q = db.query(Appointment)
        if status:
            q = q.filter(Appointment.status == status)
        if doctor_id is not None:
            q = q.filter(Appointment.doctor_id == doctor_id)
        if start_date is not None:
            q = q.filter(Appointment.appointment_date >= start_date)
        if end_date is not None:
            q = q.filter(Appointment.appointment_date <= end_date)
        return AppointmentService._page(q, page, limit)

    @staticmethod
    def cancel(db: Session, user: User, appointment_id: int, reason: Optional[str]) -> Appointment:
        reason = (reason or "").strip()
        if not reason:
            raise BadRequestError("A cancellation reason is required")
        appointment = AppointmentService.get_appointment(db, appointment_id)
        if user.role_type != "admin" and appointment.patient_id != user.id:
            raise NotFoundError("Appointment not found or you are not allowed to cancel it")
        if appointment.status not in CANCELLABLE_STATUSES:
            raise InvalidTransitionError(f"A {appointment.status} appointment cannot be cancelled")

        appointment.status = "cancelled"
        appointment.cancellation_reason = reason
        appointment.cancelled_at = utcnow()
        for recipient_id in (appointment.patient_id, appointment.doctor_id):
            NotificationService.notify(
                db,
                title="Appointment cancelled",
                message=f"Appointment on {appointment.appointment_date.isoformat()} at "
                        f"{appointment.start_time} was cancelled: {reason}",
                type="appointment_cancel",
                recipient_id=recipient_id,
                data={"appointmentId": appointment.id},
            )
        db.commit()
        db.refresh(appointment)
        logger.info("Appointment %s cancelled by user %s", appointment.id, user.id)
        return appointment

    @staticmethod
    def reschedule(db: Session, user: User, appointment_id: int, data: RescheduleRequest) -> Appointment:
        appointment = AppointmentService.get_for_user(db, user, appointment_id)
        if appointment.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(f"A {appointment.status} appointment cannot be rescheduled")
        if appointment.reschedule_count >= settings.max_reschedules:
            raise LimitReachedError(
                f"This appointment has already been rescheduled {settings.max_reschedules} times, "
                f"please contact the hospital directly"
            )
        if not appointment.can_transition_to("rescheduled"):
            raise InvalidTransitionError(f"A {appointment.status} appointment cannot be rescheduled")

        AppointmentService._ensure_future(data.appointment_date)
        AppointmentService._ensure_slot_free(
            db, appointment.doctor_id, data.appointment_date, data.time_slot.start_time, exclude_id=appointment.id
        )

        appointment.reschedule_history.append(RescheduleHistory(
            old_date=appointment.appointment_date,
            old_start_time=appointment.start_time,
            old_end_time=appointment.end_time,
            new_date=data.appointment_date,
            new_start_time=data.time_slot.start_time,
            new_end_time=data.time_slot.end_time,
            rescheduled_by_id=user.id,
            notes=data.notes,
        ))
        appointment.appointment_date = data.appointment_date
        appointment.start_time = data.time_slot.start_time
        appointment.end_time = data.time_slot.end_time
        appointment.status = "rescheduled"
        appointment.reschedule_count = appointment.reschedule_count + 1
        NotificationService.notify(
            db,
            title="Appointment rescheduled",
            message=f"Appointment moved to {data.appointment_date.isoformat()} at {data.time_slot.start_time}",
            type="appointment_update",
            recipient_id=appointment.doctor_id if user.id == appointment.patient_id else appointment.patient_id,
            data={"appointmentId": appointment.id},
        )
        db.commit()
        db.refresh(appointment)
        logger.info("Appointment %s rescheduled (%d)", appointment.id, appointment.reschedule_count)
        return appointment

    @staticmethod
    def update_status(db: Session, user: User, appointment_id: int, data: StatusUpdate) -> Appointment:
        appointment = AppointmentService.get_appointment(db, appointment_id)
        if user.role_type != "admin" and appointment.doctor_id != user.id:
            raise NotFoundError("Appointment not found or you are not its doctor")
        if not appointment.can_transition_to(data.status):
            raise InvalidTransitionError(f"Cannot change a {appointment.status} appointment to {data.status}")

        appointment.status = data.status
        if data.doctor_notes is not None:
            appointment.doctor_notes = data.doctor_notes
        if data.diagnosis is not None:
            appointment.diagnosis = data.diagnosis
        NotificationService.notify(
            db,
            title="Appointment updated",
            message=f"Your appointment on {appointment.appointment_date.isoformat()} is now {data.status}",
            type="appointment_update",
            recipient_id=appointment.patient_id,
            data={"appointmentId": appointment.id, "status": data.status},
        )
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete(db: Session, appointment_id: int) -> None:
        appointment = AppointmentService.get_appointment(db, appointment_id)
        db.delete(appointment)
        db.commit()
        logger.info("Appointment %s deleted", appointment_id)

    @staticmethod
    def doctor_schedule(db: Session, doctor_id: int, start_date: Optional[date] = None) -> List[Appointment]:
        start_date = start_date or utcnow().date()
        end_date = start_date + timedelta(days=6)
        return (
            db.query(Appointment)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date >= start_date,
                Appointment.appointment_date <= end_date,
                Appointment.status != "cancelled",
            )
            .order_by(Appointment.appointment_date, Appointment.start_time)
            .all()
        )

    @staticmethod
    def booked_slots(db: Session, doctor_id: int, day: date) -> List[Appointment]:
        return (
            db.query(Appointment)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == day,
                Appointment.status != "cancelled",
            )
            .order_by(Appointment.start_time)
            .all()
        )

    @staticmethod
    def stats(db: Session) -> dict:
        status_stats = [
            {"status": status, "count": count}
            for status, count in db.query(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status).all()
        ]
        daily_stats = [
            {"appointment_date": day, "count": count}
            for day, count in (
                db.query(Appointment.appointment_date, func.count(Appointment.id))
                .group_by(Appointment.appointment_date)
                .order_by(Appointment.appointment_date.desc())
                .limit(7)
                .all()
            )
        ]
        doctor_stats = [
            {"doctor_id": doctor_id, "doctor_name": name, "count": count}
            for doctor_id, name, count in (
                db.query(Appointment.doctor_id, User.full_name, func.count(Appointment.id))
                .join(User, User.id == Appointment.doctor_id)
                .group_by(Appointment.doctor_id, User.full_name)
                .order_by(func.count(Appointment.id).desc())
                .limit(5)
                .all()
            )
        ]
        return {"status_stats": status_stats, "daily_stats": daily_stats, "doctor_stats": doctor_stats}

    @staticmethod
    def _ensure_future(day: date) -> None:
        if day < utcnow().date():
            raise BadRequestError("Appointment date cannot be in the past")

    @staticmethod
    def _ensure_slot_free(db: Session, doctor_id: int, day: date, start_time: str, exclude_id: Optional[int] = None) -> None:
        q = db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == day,
            Appointment.start_time == start_time,
            Appointment.status != "cancelled",
        )
        if exclude_id is not None:
            q = q.filter(Appointment.id != exclude_id)
        if q.first():
            raise ConflictError("This time slot is already booked")

    @staticmethod
    def _page(q, page: int, limit: int) -> Tuple[List[Appointment], int]:
        limit = min(max(limit, 1), 500)
        page = max(page, 1)
        total = q.count()
        items = (
            q.order_by(Appointment.appointment_date.desc(), Appointment.start_time.desc(), Appointment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total
