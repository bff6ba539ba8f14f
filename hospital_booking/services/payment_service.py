import logging
import uuid
from sqlalchemy.orm import Session
from typing import List, Optional
from hospital_booking.config import settings
from hospital_booking.database import utcnow
from hospital_booking.errors import BadRequestError, NotFoundError
from hospital_booking.models.appointment import Appointment
from hospital_booking.models.payment import Payment
from hospital_booking.models.user import User
from hospital_booking.services.appointment_service import AppointmentService
from hospital_booking.services.coupon_service import CouponService
from hospital_booking.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class PaymentService:
    """Payment intents and gateway confirmations (PayPal capture, MoMo IPN)"""

    @staticmethod
    def create_intent(db: Session, user: User, appointment_id: int, method: str) -> Payment:
        """One pending intent per appointment; asking again with the same gateway returns it."""
        appointment = AppointmentService.get_appointment(db, appointment_id)
        if appointment.patient_id != user.id:
            raise NotFoundError("Appointment not found")
        if appointment.payment_status == "completed":
            raise BadRequestError("Appointment has already been paid")
        if appointment.status in ("cancelled", "no-show"):
            raise BadRequestError(f"A {appointment.status} appointment cannot be paid")
        if appointment.total_amount <= 0:
            raise BadRequestError("Nothing to pay for this appointment")

        pending = (
            db.query(Payment)
            .filter(Payment.appointment_id == appointment.id, Payment.status == "pending")
            .first()
        )
        if pending:
            if pending.method != method:
                raise BadRequestError(f"A {pending.method} payment is already in progress for this appointment")
            logger.info("Reusing payment %s for appointment %s", pending.transaction_id, appointment.id)
            return pending

        payment = Payment(
            appointment_id=appointment.id,
            patient_id=user.id,
            amount=appointment.total_amount,
            method=method,
            transaction_id=f"{method.upper()}{uuid.uuid4().hex[:24].upper()}",
        )
        db.add(payment)
        appointment.payment_status = "pending"
        appointment.payment_method = method
        db.commit()
        db.refresh(payment)
        logger.info("Payment %s created for appointment %s via %s", payment.transaction_id, appointment.id, method)
        return payment

    @staticmethod
    def redirect_url(payment: Payment) -> Optional[str]:
        if payment.method != "momo":
            return None
        return f"{settings.momo_redirect_base}?orderId={payment.transaction_id}&amount={int(payment.amount)}"

    @staticmethod
    def confirm(
        db: Session,
        transaction_id: str,
        succeeded: bool,
        gateway_response: Optional[dict] = None,
        actor: Optional[User] = None,
    ) -> Payment:
        """Apply a gateway callback. Payment, appointment and coupon change in one transaction.

        When ``actor`` is given the payment must be theirs (admins excepted).
        """
        payment = db.query(Payment).filter(Payment.transaction_id == transaction_id).first()
        if not payment:
            raise NotFoundError("Payment not found")
        if actor is not None and actor.role_type != "admin" and payment.patient_id != actor.id:
            raise NotFoundError("Payment not found")
        if payment.status in ("completed", "refunded"):
            # gateways retry callbacks; a settled payment is left as it is
            return payment

        appointment = db.query(Appointment).filter(Appointment.id == payment.appointment_id).first()
        payment.gateway_response = gateway_response
        try:
            if succeeded:
                payment.status = "completed"
                payment.paid_at = utcnow()
                if appointment.payment_status == "completed":
                    logger.warning(
                        "Payment %s captured for appointment %s which was already paid",
                        transaction_id, appointment.id,
                    )
                else:
                    appointment.payment_status = "completed"
                    if appointment.status == "pending":
                        appointment.status = "confirmed"
                    if appointment.coupon_id is not None:
                        CouponService.increment_redemption(db, appointment.coupon_id)
                    NotificationService.notify(
                        db,
                        title="Payment received",
                        message=f"Payment of {payment.amount:,.0f} {settings.currency} was received",
                        type="payment",
                        recipient_id=payment.patient_id,
                        data={"appointmentId": appointment.id, "transactionId": payment.transaction_id},
                    )
            else:
                payment.status = "failed"
                if appointment.payment_status != "completed":
                    appointment.payment_status = "unpaid"
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to apply payment confirmation %s", transaction_id)
            raise
        db.refresh(payment)
        logger.info("Payment %s %s", transaction_id, payment.status)
        return payment

    @staticmethod
    def history(db: Session, user: User) -> List[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.patient_id == user.id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .all()
        )
