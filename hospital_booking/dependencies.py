import logging
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from typing import Optional
from hospital_booking.database import get_db
from hospital_booking.errors import UnauthorizedError, ForbiddenError
from hospital_booking.models.user import User
from hospital_booking.security import decode_token, resolve_permissions

logger = logging.getLogger(__name__)


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Not authorized, please log in")
    payload = decode_token(authorization[len("Bearer "):].strip())
    if payload is None:
        logger.warning("Rejected invalid or expired token")
        raise UnauthorizedError("Token is invalid or has expired")

    user = db.query(User).filter(User.id == payload.get("id")).first()
    if not user:
        raise UnauthorizedError("User no longer exists")
    if user.is_locked:
        raise ForbiddenError("Account is locked")
    return user


def require_roles(*role_types: str):
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role_type not in role_types:
            raise ForbiddenError("You do not have access to this resource")
        return user
    return checker


def require_permission(code: str):
    def checker(user: User = Depends(get_current_user)) -> User:
        if code not in resolve_permissions(user):
            raise ForbiddenError("You do not have permission to perform this action")
        return user
    return checker


require_admin = require_roles("admin")
require_doctor = require_roles("doctor", "admin")
