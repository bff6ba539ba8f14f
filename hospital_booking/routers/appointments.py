from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from hospital_booking.database import get_db
from hospital_booking.dependencies import get_current_user, require_admin, require_doctor
from hospital_booking.errors import BadRequestError
from hospital_booking.models.user import User
from hospital_booking.schemas.appointment import (
    AppointmentCreate, AppointmentDetail, AppointmentResponse, AppointmentReview, AppointmentStats,
    BookedSlot, CancelRequest, RescheduleRequest, StatusUpdate,
)
from hospital_booking.schemas.common import ApiResponse, MessageResponse, PaginatedResponse, paginate
from hospital_booking.schemas.review import ReviewResponse
from hospital_booking.services.appointment_service import AppointmentService
from hospital_booking.services.review_service import ReviewService

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


@router.post("", response_model=ApiResponse[AppointmentResponse], status_code=201)
def book_appointment(payload: AppointmentCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    appointment = AppointmentService.book(db, user, payload)
    return {"success": True, "data": appointment, "message": "Appointment booked"}


@router.get("", response_model=PaginatedResponse[AppointmentResponse])
def my_appointments(
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, total = AppointmentService.list_for_user(db, user, status, page, limit)
    return paginate(items, total, page, limit)


@router.get("/all", response_model=PaginatedResponse[AppointmentResponse])
def all_appointments(
    status: Optional[str] = None,
    doctor_id: Optional[int] = Query(None, alias="doctorId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    items, total = AppointmentService.list_all(db, status, doctor_id, start_date, end_date, page, limit)
    return paginate(items, total, page, limit)


@router.get("/stats", response_model=ApiResponse[AppointmentStats])
def appointment_stats(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return {"success": True, "data": AppointmentService.stats(db)}


@router.get("/doctor-schedule", response_model=ApiResponse[List[AppointmentResponse]])
def doctor_schedule(
    doctor_id: Optional[int] = Query(None, alias="doctorId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    db: Session = Depends(get_db),
    user: User = Depends(require_doctor),
):
    if user.role_type == "doctor":
        doctor_id = user.id
    elif doctor_id is None:
        raise BadRequestError("doctorId is required")
    return {"success": True, "data": AppointmentService.doctor_schedule(db, doctor_id, start_date)}


@router.get("/availability", response_model=ApiResponse[List[BookedSlot]])
def availability(
    doctor_id: int = Query(..., alias="doctorId"),
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": AppointmentService.booked_slots(db, doctor_id, day)}


@router.get("/{appointment_id}", response_model=ApiResponse[AppointmentDetail])
def get_appointment(appointment_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": AppointmentService.get_for_user(db, user, appointment_id)}


@router.put("/{appointment_id}/cancel", response_model=ApiResponse[AppointmentResponse])
def cancel_appointment(
    appointment_id: int,
    payload: CancelRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = AppointmentService.cancel(db, user, appointment_id, payload.cancellation_reason)
    return {"success": True, "data": appointment, "message": "Appointment cancelled"}


@router.delete("/{appointment_id}", response_model=ApiResponse[AppointmentResponse])
def cancel_appointment_by_delete(
    appointment_id: int,
    reason: Optional[str] = Query(None, alias="cancellationReason"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = AppointmentService.cancel(db, user, appointment_id, reason)
    return {"success": True, "data": appointment, "message": "Appointment cancelled"}


@router.put("/{appointment_id}/reschedule", response_model=ApiResponse[AppointmentDetail])
def reschedule_appointment(
    appointment_id: int,
    payload: RescheduleRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = AppointmentService.reschedule(db, user, appointment_id, payload)
    return {"success": True, "data": appointment, "message": "Appointment rescheduled"}


@router.put("/{appointment_id}/status", response_model=ApiResponse[AppointmentResponse])
def update_status(
    appointment_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_doctor),
):
    return {"success": True, "data": AppointmentService.update_status(db, user, appointment_id, payload)}


@router.post("/{appointment_id}/review", response_model=ApiResponse[ReviewResponse], status_code=201)
def review_appointment(
    appointment_id: int,
    payload: AppointmentReview,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    appointment = AppointmentService.get_for_user(db, user, appointment_id)
    if appointment.patient_id != user.id:
        raise BadRequestError("Only the patient can review this appointment")
    if appointment.status != "completed":
        raise BadRequestError("Only completed appointments can be reviewed")
    if appointment.is_reviewed:
        raise BadRequestError("You have already reviewed this appointment")
    review = ReviewService.create_review(
        db, user, appointment.hospital_id, payload.rating, payload.comment, appointment_id=appointment.id
    )
    return {"success": True, "data": review, "message": "Thank you for your review"}


@router.delete("/{appointment_id}/admin", response_model=MessageResponse)
def delete_appointment(appointment_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    AppointmentService.delete(db, appointment_id)
    return {"success": True, "message": "Appointment deleted"}
