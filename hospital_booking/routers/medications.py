from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from hospital_booking.database import get_db
from hospital_booking.dependencies import require_permission
from hospital_booking.models.user import User
from hospital_booking.schemas.common import ApiResponse, MessageResponse, PaginatedResponse, paginate
from hospital_booking.schemas.medication import MedicationCreate, MedicationResponse, MedicationUpdate, StockAdjustment
from hospital_booking.services.medication_service import MedicationService

router = APIRouter(prefix="/api/medications", tags=["medications"])

manage_medications = require_permission("manage_medications")


@router.get("", response_model=PaginatedResponse[MedicationResponse])
def list_medications(
    search: Optional[str] = None,
    category: Optional[str] = None,
    include_inactive: bool = Query(False, alias="includeInactive"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: User = Depends(manage_medications),
):
    items, total = MedicationService.list_medications(db, search, category, include_inactive, page, limit)
    return paginate(items, total, page, limit)


@router.get("/low-stock", response_model=ApiResponse[List[MedicationResponse]])
def low_stock(db: Session = Depends(get_db), admin: User = Depends(manage_medications)):
    return {"success": True, "data": MedicationService.low_stock(db)}


@router.post("", response_model=ApiResponse[MedicationResponse], status_code=201)
def create_medication(payload: MedicationCreate, db: Session = Depends(get_db), admin: User = Depends(manage_medications)):
    return {"success": True, "data": MedicationService.create(db, payload, created_by_id=admin.id)}


@router.get("/{medication_id}", response_model=ApiResponse[MedicationResponse])
def get_medication(medication_id: int, db: Session = Depends(get_db), admin: User = Depends(manage_medications)):
    return {"success": True, "data": MedicationService.get(db, medication_id)}


@router.put("/{medication_id}", response_model=ApiResponse[MedicationResponse])
def update_medication(
    medication_id: int,
    payload: MedicationUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(manage_medications),
):
    return {"success": True, "data": MedicationService.update(db, medication_id, payload)}


@router.put("/{medication_id}/stock", response_model=ApiResponse[MedicationResponse])
def adjust_stock(
    medication_id: int,
    payload: StockAdjustment,
    db: Session = Depends(get_db),
    admin: User = Depends(manage_medications),
):
    return {"success": True, "data": MedicationService.adjust_stock(db, medication_id, payload.delta)}


@router.delete("/{medication_id}", response_model=MessageResponse)
def delete_medication(medication_id: int, db: Session = Depends(get_db), admin: User = Depends(manage_medications)):
    MedicationService.deactivate(db, medication_id)
    return {"success": True, "message": "Medication deactivated"}
