from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from hospital_booking.database import get_db
from hospital_booking.dependencies import require_permission
from hospital_booking.models.user import User
from hospital_booking.schemas.common import ApiResponse, PaginatedResponse, paginate
from hospital_booking.schemas.medical_record import (
    MedicalRecordCreate, MedicalRecordDetail, MedicalRecordResponse, MedicalRecordUpdate,
)
from hospital_booking.services.medical_record_service import MedicalRecordService

router = APIRouter(prefix="/api/medical-records", tags=["medical-records"])

view_own_records = require_permission("view_own_records")
update_medical_records = require_permission("update_medical_records")
view_patients = require_permission("view_patients")


@router.get("", response_model=PaginatedResponse[MedicalRecordResponse])
def my_records(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    db: Session = Depends(get_db),
    user: User = Depends(view_own_records),
):
    items, total = MedicalRecordService.list_for_user(db, user, page, limit)
    return paginate(items, total, page, limit)


@router.post("", response_model=ApiResponse[MedicalRecordDetail], status_code=201)
def create_record(
    payload: MedicalRecordCreate,
    db: Session = Depends(get_db),
    doctor: User = Depends(update_medical_records),
):
    record = MedicalRecordService.create(db, doctor, payload)
    return {"success": True, "data": record, "message": "Medical record created"}


@router.get("/patients/{patient_id}", response_model=ApiResponse[List[MedicalRecordResponse]])
def patient_records(patient_id: int, db: Session = Depends(get_db), user: User = Depends(view_patients)):
    return {"success": True, "data": MedicalRecordService.list_for_patient(db, user, patient_id)}


@router.get("/{record_id}", response_model=ApiResponse[MedicalRecordDetail])
def get_record(record_id: int, db: Session = Depends(get_db), user: User = Depends(view_own_records)):
    return {"success": True, "data": MedicalRecordService.get_for_user(db, user, record_id)}


@router.put("/{record_id}", response_model=ApiResponse[MedicalRecordDetail])
def update_record(
    record_id: int,
    payload: MedicalRecordUpdate,
    db: Session = Depends(get_db),
    doctor: User = Depends(update_medical_records),
):
    return {"success": True, "data": MedicalRecordService.update(db, doctor, record_id, payload)}
