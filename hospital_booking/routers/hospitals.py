from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from hospital_booking.database import get_db
from hospital_booking.dependencies import get_current_user, require_permission
from hospital_booking.models.user import User
from hospital_booking.schemas.catalog import (
    HospitalCreate, HospitalResponse, HospitalUpdate, ServiceCreate, ServiceResponse, ServiceUpdate,
    SpecialtyCreate, SpecialtyResponse,
)
from hospital_booking.schemas.common import ApiResponse, MessageResponse
from hospital_booking.schemas.review import ReviewCreate, ReviewResponse
from hospital_booking.schemas.user import UserResponse
from hospital_booking.services.catalog_service import CatalogService
from hospital_booking.services.review_service import ReviewService

router = APIRouter(prefix="/api", tags=["catalog"])

manage_catalog = require_permission("manage_catalog")


@router.get("/hospitals", response_model=ApiResponse[List[HospitalResponse]])
def list_hospitals(db: Session = Depends(get_db)):
    return {"success": True, "data": CatalogService.list_hospitals(db)}


@router.post("/hospitals", response_model=ApiResponse[HospitalResponse], status_code=201)
def create_hospital(payload: HospitalCreate, db: Session = Depends(get_db), admin: User = Depends(manage_catalog)):
    return {"success": True, "data": CatalogService.create_hospital(db, payload)}


@router.get("/hospitals/{hospital_id}", response_model=ApiResponse[HospitalResponse])
def get_hospital(hospital_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": CatalogService.get_hospital(db, hospital_id)}


@router.put("/hospitals/{hospital_id}", response_model=ApiResponse[HospitalResponse])
def update_hospital(
    hospital_id: int, payload: HospitalUpdate, db: Session = Depends(get_db), admin: User = Depends(manage_catalog)
):
    return {"success": True, "data": CatalogService.update_hospital(db, hospital_id, payload)}


@router.get("/hospitals/{hospital_id}/reviews", response_model=ApiResponse[List[ReviewResponse]])
def list_reviews(hospital_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": ReviewService.list_reviews(db, hospital_id)}


@router.post("/hospitals/{hospital_id}/reviews", response_model=ApiResponse[ReviewResponse], status_code=201)
def create_review(
    hospital_id: int, payload: ReviewCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)
):
    review = ReviewService.create_review(db, user, hospital_id, payload.rating, payload.comment, payload.appointment_id)
    return {"success": True, "data": review}


@router.delete("/hospitals/{hospital_id}/reviews/{review_id}", response_model=MessageResponse)
def delete_review(
    hospital_id: int, review_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)
):
    ReviewService.delete_review(db, user, hospital_id, review_id)
    return {"success": True, "message": "Review deleted"}


@router.get("/specialties", response_model=ApiResponse[List[SpecialtyResponse]])
def list_specialties(db: Session = Depends(get_db)):
    return {"success": True, "data": CatalogService.list_specialties(db)}


@router.post("/specialties", response_model=ApiResponse[SpecialtyResponse], status_code=201)
def create_specialty(payload: SpecialtyCreate, db: Session = Depends(get_db), admin: User = Depends(manage_catalog)):
    return {"success": True, "data": CatalogService.create_specialty(db, payload)}


@router.get("/services", response_model=ApiResponse[List[ServiceResponse]])
def list_services(specialty_id: Optional[int] = Query(None, alias="specialtyId"), db: Session = Depends(get_db)):
    return {"success": True, "data": CatalogService.list_services(db, specialty_id)}


@router.post("/services", response_model=ApiResponse[ServiceResponse], status_code=201)
def create_service(payload: ServiceCreate, db: Session = Depends(get_db), admin: User = Depends(manage_catalog)):
    return {"success": True, "data": CatalogService.create_service(db, payload)}


@router.get("/services/{service_id}", response_model=ApiResponse[ServiceResponse])
def get_service(service_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": CatalogService.get_service(db, service_id)}


@router.put("/services/{service_id}", response_model=ApiResponse[ServiceResponse])
def update_service(
    service_id: int, payload: ServiceUpdate, db: Session = Depends(get_db), admin: User = Depends(manage_catalog)
):
    return {"success": True, "data": CatalogService.update_service(db, service_id, payload)}


@router.get("/doctors", response_model=ApiResponse[List[UserResponse]])
def list_doctors(
    hospital_id: Optional[int] = Query(None, alias="hospitalId"),
    specialty_id: Optional[int] = Query(None, alias="specialtyId"),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": CatalogService.list_doctors(db, hospital_id, specialty_id)}
