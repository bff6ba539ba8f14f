from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hospital_booking.database import get_db
from hospital_booking.dependencies import get_current_user
from hospital_booking.models.user import User
from hospital_booking.schemas.common import ApiResponse, MessageResponse
from hospital_booking.schemas.user import (
    AuthPayload, AvatarUpdate, LoginRequest, PasswordChange, ProfileUpdate, RegisterRequest, UserResponse,
)
from hospital_booking.security import create_token, resolve_permissions
from hospital_booking.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_payload(user: User) -> dict:
    return {
        "token": create_token(user.id, user.role_type),
        "user": user,
        "permissions": sorted(resolve_permissions(user)),
    }


@router.post("/register", response_model=ApiResponse[AuthPayload], status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = UserService.register(db, payload)
    return {"success": True, "data": _auth_payload(user), "message": "Registration successful"}


@router.post("/login", response_model=ApiResponse[AuthPayload])
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = UserService.authenticate(db, payload.email, payload.password)
    return {"success": True, "data": _auth_payload(user)}


@router.get("/profile", response_model=ApiResponse[UserResponse])
def get_profile(user: User = Depends(get_current_user)):
    return {"success": True, "data": user}


@router.put("/profile", response_model=ApiResponse[UserResponse])
def update_profile(payload: ProfileUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": UserService.update_profile(db, user, payload), "message": "Profile updated"}


@router.put("/password", response_model=MessageResponse)
def change_password(payload: PasswordChange, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    UserService.change_password(db, user, payload)
    return {"success": True, "message": "Password changed"}


@router.put("/avatar", response_model=ApiResponse[UserResponse])
def update_avatar(payload: AvatarUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": UserService.update_avatar(db, user, payload)}
