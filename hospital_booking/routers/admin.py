from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from hospital_booking.database import get_db
from hospital_booking.dependencies import require_permission
from hospital_booking.models.user import User
from hospital_booking.schemas.common import ApiResponse, MessageResponse, PaginatedResponse, paginate
from hospital_booking.schemas.user import (
    AdminUserUpdate, PermissionCreate, PermissionResponse, RoleCreate, RoleResponse, RoleUpdate, UserResponse,
)
from hospital_booking.services.user_service import RoleService, UserService

router = APIRouter(prefix="/api/admin", tags=["admin"])

manage_users = require_permission("manage_users")
manage_roles = require_permission("manage_roles")
manage_permissions = require_permission("manage_permissions")


@router.get("/users", response_model=PaginatedResponse[UserResponse])
def list_users(
    role_type: Optional[str] = Query(None, alias="roleType"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: User = Depends(manage_users),
):
    users, total = UserService.list_users(db, role_type, search, page, limit)
    return paginate(users, total, page, limit)


@router.get("/users/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(manage_users)):
    return {"success": True, "data": UserService.get_user(db, user_id)}


@router.put("/users/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(user_id: int, payload: AdminUserUpdate, db: Session = Depends(get_db), admin: User = Depends(manage_users)):
    return {"success": True, "data": UserService.admin_update(db, admin, user_id, payload)}


@router.put("/users/{user_id}/lock", response_model=ApiResponse[UserResponse])
def lock_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(manage_users)):
    return {"success": True, "data": UserService.set_locked(db, admin, user_id, True), "message": "User locked"}


@router.put("/users/{user_id}/unlock", response_model=ApiResponse[UserResponse])
def unlock_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(manage_users)):
    return {"success": True, "data": UserService.set_locked(db, admin, user_id, False), "message": "User unlocked"}


@router.get("/permissions", response_model=ApiResponse[List[PermissionResponse]])
def list_permissions(db: Session = Depends(get_db), admin: User = Depends(manage_permissions)):
    return {"success": True, "data": RoleService.list_permissions(db)}


@router.post("/permissions", response_model=ApiResponse[PermissionResponse], status_code=201)
def create_permission(payload: PermissionCreate, db: Session = Depends(get_db), admin: User = Depends(manage_permissions)):
    return {"success": True, "data": RoleService.create_permission(db, payload)}


@router.get("/roles", response_model=ApiResponse[List[RoleResponse]])
def list_roles(db: Session = Depends(get_db), admin: User = Depends(manage_roles)):
    return {"success": True, "data": RoleService.list_roles(db)}


@router.post("/roles", response_model=ApiResponse[RoleResponse], status_code=201)
def create_role(payload: RoleCreate, db: Session = Depends(get_db), admin: User = Depends(manage_roles)):
    return {"success": True, "data": RoleService.create_role(db, payload)}


@router.put("/roles/{role_id}", response_model=ApiResponse[RoleResponse])
def update_role(role_id: int, payload: RoleUpdate, db: Session = Depends(get_db), admin: User = Depends(manage_roles)):
    return {"success": True, "data": RoleService.update_role(db, role_id, payload)}


@router.delete("/roles/{role_id}", response_model=MessageResponse)
def delete_role(role_id: int, db: Session = Depends(get_db), admin: User = Depends(manage_roles)):
    RoleService.delete_role(db, role_id)
    return {"success": True, "message": "Role deleted"}
