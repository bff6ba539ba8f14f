from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from hospital_booking.database import get_db
from hospital_booking.dependencies import get_current_user
from hospital_booking.models.user import User
from hospital_booking.schemas.common import ApiResponse
from hospital_booking.schemas.payment import MomoCallback, PaymentCreate, PaymentIntent, PaymentResponse, PaypalCapture
from hospital_booking.services.payment_service import PaymentService

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get("/history", response_model=ApiResponse[List[PaymentResponse]])
def payment_history(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": PaymentService.history(db, user)}


@router.post("/paypal/capture", response_model=ApiResponse[PaymentResponse])
def paypal_capture(payload: PaypalCapture, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    payment = PaymentService.confirm(db, payload.transaction_id, payload.approved, payload.details, actor=user)
    return {"success": True, "data": payment}


@router.post("/momo/ipn", response_model=ApiResponse[PaymentResponse])
def momo_ipn(payload: MomoCallback, db: Session = Depends(get_db)):
    payment = PaymentService.confirm(
        db, payload.transaction_id, payload.result_code == 0, payload.model_dump(by_alias=True)
    )
    return {"success": True, "data": payment}


@router.post("/{appointment_id}", response_model=ApiResponse[PaymentIntent], status_code=201)
def create_payment(
    appointment_id: int,
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    payment = PaymentService.create_intent(db, user, appointment_id, payload.method)
    return {"success": True, "data": {"payment": payment, "redirect_url": PaymentService.redirect_url(payment)}}
