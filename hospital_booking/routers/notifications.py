from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from hospital_booking.database import get_db
from hospital_booking.dependencies import get_current_user
from hospital_booking.models.user import User
from hospital_booking.schemas.common import ApiResponse, MessageResponse
from hospital_booking.schemas.notification import NotificationList, NotificationResponse
from hospital_booking.services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationList)
def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, unread_count = NotificationService.list_for_user(db, user, unread_only, limit)
    return {"success": True, "unread_count": unread_count, "data": items}


@router.put("/read-all", response_model=MessageResponse)
def mark_all_read(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    count = NotificationService.mark_all_as_read(db, user)
    return {"success": True, "message": f"{count} notifications marked as read"}


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
def mark_read(notification_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": NotificationService.mark_as_read(db, user, notification_id)}


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    NotificationService.delete(db, user, notification_id)
    return {"success": True, "message": "Notification deleted"}
