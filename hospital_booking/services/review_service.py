import logging
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional
from hospital_booking.errors import BadRequestError, ForbiddenError, NotFoundError
from hospital_booking.models.appointment import Appointment
from hospital_booking.models.catalog import Hospital
from hospital_booking.models.review import Review
from hospital_booking.models.user import User
from hospital_booking.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class ReviewService:
    """Hospital reviews and the rating aggregate kept on the hospital row"""

    @staticmethod
    def list_reviews(db: Session, hospital_id: int) -> List[Review]:
        CatalogService.get_hospital(db, hospital_id)
        return (
            db.query(Review)
            .filter(Review.hospital_id == hospital_id, Review.type == "hospital", Review.is_active == True)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    @staticmethod
    def create_review(
        db: Session,
        user: User,
        hospital_id: int,
        rating: int,
        comment: str = "",
        appointment_id: Optional[int] = None,
    ) -> Review:
        hospital = CatalogService.get_hospital(db, hospital_id)

        appointment = None
        if appointment_id is not None:
            appointment = (
                db.query(Appointment)
                .filter(
                    Appointment.id == appointment_id,
                    Appointment.patient_id == user.id,
                    Appointment.hospital_id == hospital_id,
                    Appointment.status == "completed",
                )
                .first()
            )
            if not appointment:
                raise BadRequestError("You can only review a hospital after a completed appointment there")
            existing = (
                db.query(Review.id)
                .filter(Review.appointment_id == appointment_id, Review.user_id == user.id, Review.hospital_id == hospital_id)
                .first()
            )
            if existing:
                raise BadRequestError("You have already reviewed this appointment")

        review = Review(
            user_id=user.id,
            hospital_id=hospital_id,
            appointment_id=appointment_id,
            rating=rating,
            comment=comment,
            type="hospital",
        )
        db.add(review)
        if appointment is not None:
            appointment.is_reviewed = True
        db.flush()
        ReviewService.recompute_rating(db, hospital)
        db.commit()
        db.refresh(review)
        logger.info("User %s reviewed hospital %s (%d stars)", user.id, hospital_id, rating)
        return review

    @staticmethod
    def delete_review(db: Session, user: User, hospital_id: int, review_id: int) -> None:
        hospital = CatalogService.get_hospital(db, hospital_id)
        review = db.query(Review).filter(Review.id == review_id, Review.hospital_id == hospital_id).first()
        if not review:
            raise NotFoundError("Review not found")
        if review.user_id != user.id and user.role_type != "admin":
            raise ForbiddenError("You can only delete your own reviews")
        if review.appointment_id is not None:
            appointment = db.query(Appointment).filter(Appointment.id == review.appointment_id).first()
            if appointment is not None:
                appointment.is_reviewed = False
        db.delete(review)
        db.flush()
        ReviewService.recompute_rating(db, hospital)
        db.commit()

    @staticmethod
    def recompute_rating(db: Session, hospital: Hospital) -> None:
        """Arithmetic mean over the hospital's active reviews."""
        average, count = (
            db.query(func.avg(Review.rating), func.count(Review.id))
            .filter(Review.hospital_id == hospital.id, Review.type == "hospital", Review.is_active == True)
            .one()
        )
        hospital.average_rating = float(average) if count else 0.0
        hospital.review_count = count
