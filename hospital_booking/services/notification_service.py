from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from hospital_booking.database import utcnow
from hospital_booking.errors import BadRequestError, NotFoundError
from hospital_booking.models.notification import Notification
from hospital_booking.models.user import User


class NotificationService:
    """In-app notifications. Writers add to the session; the caller commits."""

    @staticmethod
    def notify(
        db: Session,
        title: str,
        message: str,
        type: str,
        recipient_id: Optional[int] = None,
        recipient_role: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Notification:
        if recipient_id is None and recipient_role is None:
            raise BadRequestError("A notification needs a recipient")
        notification = Notification(
            recipient_id=recipient_id,
            recipient_role=recipient_role,
            title=title,
            message=message,
            type=type,
            data=data,
        )
        db.add(notification)
        return notification

    @staticmethod
    def _visible_to(user: User):
        return or_(Notification.recipient_id == user.id, Notification.recipient_role == user.role_type)

    @staticmethod
    def list_for_user(db: Session, user: User, unread_only: bool = False, limit: int = 50) -> Tuple[List[Notification], int]:
        q = db.query(Notification).filter(NotificationService._visible_to(user))
        unread_count = q.filter(Notification.is_read == False).count()
        if unread_only:
            q = q.filter(Notification.is_read == False)
        items = q.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(min(max(limit, 1), 200)).all()
        return items, unread_count

    @staticmethod
    def _get_owned(db: Session, user: User, notification_id: int) -> Notification:
        notification = (
            db.query(Notification)
            .filter(Notification.id == notification_id, NotificationService._visible_to(user))
            .first()
        )
        if not notification:
            raise NotFoundError("Notification not found")
        return notification

    @staticmethod
    def mark_as_read(db: Session, user: User, notification_id: int) -> Notification:
        notification = NotificationService._get_owned(db, user, notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            db.commit()
            db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_as_read(db: Session, user: User) -> int:
        count = (
            db.query(Notification)
            .filter(NotificationService._visible_to(user), Notification.is_read == False)
            .update({Notification.is_read: True, Notification.read_at: utcnow()}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def delete(db: Session, user: User, notification_id: int) -> None:
        notification = NotificationService._get_owned(db, user, notification_id)
        db.delete(notification)
        db.commit()
