from pydantic import Field
from typing import Any, Dict, Optional
from datetime import datetime
from hospital_booking.schemas.common import CamelModel


class PaymentCreate(CamelModel):
    method: str = Field(..., pattern=r"^(paypal|momo)$")


class PaypalCapture(CamelModel):
    transaction_id: str
    approved: bool = True
    details: Dict[str, Any] = Field(default_factory=dict)


class MomoCallback(CamelModel):
    transaction_id: str = Field(..., alias="orderId")
    result_code: int
    message: str = ""


class PaymentResponse(CamelModel):
    id: int
    appointment_id: int
    amount: float
    method: str
    transaction_id: str
    status: str
    paid_at: Optional[datetime] = None
    created_at: datetime


class PaymentIntent(CamelModel):
    payment: PaymentResponse
    redirect_url: Optional[str] = None
