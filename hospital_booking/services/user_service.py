import logging
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from hospital_booking.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from hospital_booking.models.user import Permission, Role, User
from hospital_booking.schemas.user import (
    AdminUserUpdate, AvatarUpdate, PasswordChange, PermissionCreate, ProfileUpdate,
    RegisterRequest, RoleCreate, RoleUpdate,
)
from hospital_booking.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Accounts, profiles and admin user management"""

    @staticmethod
    def register(db: Session, data: RegisterRequest) -> User:
        email = data.email.lower()
        if db.query(User.id).filter(User.email == email).first():
            raise ConflictError("Email is already registered")
        user = User(
            full_name=data.full_name.strip(),
            email=email,
            phone_number=data.phone_number,
            password_hash=hash_password(data.password),
            gender=data.gender,
            date_of_birth=data.date_of_birth,
            address=data.address,
            role_type="user",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> User:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(user.password_hash, password):
            logger.warning("Failed login for %s", email)
            raise UnauthorizedError("Invalid email or password")
        if user.is_locked:
            raise ForbiddenError("Account is locked")
        return user

    @staticmethod
    def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def change_password(db: Session, user: User, data: PasswordChange) -> None:
        if not verify_password(user.password_hash, data.current_password):
            raise BadRequestError("Current password is incorrect")
        if data.current_password == data.new_password:
            raise BadRequestError("New password must differ from the current password")
        user.password_hash = hash_password(data.new_password)
        db.commit()

    @staticmethod
    def update_avatar(db: Session, user: User, data: AvatarUpdate) -> User:
        user.avatar_url = data.avatar_url
        user.avatar_public_id = data.avatar_public_id
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def list_users(
        db: Session,
        role_type: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[User], int]:
        limit = min(max(limit, 1), 500)
        page = max(page, 1)
        q = db.query(User)
        if role_type:
            q = q.filter(User.role_type == role_type)
        if search:
            pattern = f"%{search.strip()}%"
            q = q.filter(User.full_name.ilike(pattern) | User.email.ilike(pattern))
        total = q.count()
        return q.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all(), total

    @staticmethod
    def admin_update(db: Session, actor: User, user_id: int, data: AdminUserUpdate) -> User:
        user = UserService.get_user(db, user_id)
        changes = data.model_dump(exclude_unset=True)
        if "role_type" in changes and actor.role_type != "admin":
            raise ForbiddenError("Only administrators can change a user's role type")
        if changes.get("role_id") is not None and not db.query(Role.id).filter(Role.id == changes["role_id"]).first():
            raise NotFoundError("Role not found")
        for field, value in changes.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def set_locked(db: Session, actor: User, user_id: int, locked: bool) -> User:
        if actor.id == user_id:
            raise BadRequestError("You cannot lock your own account")
        user = UserService.get_user(db, user_id)
        user.is_locked = locked
        db.commit()
        db.refresh(user)
        logger.info("User %s %s by admin %s", user.id, "locked" if locked else "unlocked", actor.id)
        return user


class RoleService:
    """Roles and the permission codes they grant"""

    @staticmethod
    def list_permissions(db: Session) -> List[Permission]:
        return db.query(Permission).order_by(Permission.code).all()

    @staticmethod
    def create_permission(db: Session, data: PermissionCreate) -> Permission:
        if db.query(Permission.id).filter((Permission.code == data.code) | (Permission.name == data.name)).first():
            raise ConflictError("Permission already exists")
        permission = Permission(code=data.code, name=data.name, description=data.description)
        db.add(permission)
        db.commit()
        db.refresh(permission)
        return permission

    @staticmethod
    def list_roles(db: Session) -> List[Role]:
        return db.query(Role).order_by(Role.id).all()

    @staticmethod
    def get_role(db: Session, role_id: int) -> Role:
        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            raise NotFoundError("Role not found")
        return role

    @staticmethod
    def _load_permissions(db: Session, permission_ids: List[int]) -> List[Permission]:
        ids = list(dict.fromkeys(permission_ids))
        permissions = db.query(Permission).filter(Permission.id.in_(ids)).all() if ids else []
        if len(permissions) != len(ids):
            raise NotFoundError("One or more permissions were not found")
        return permissions

    @staticmethod
    def create_role(db: Session, data: RoleCreate) -> Role:
        if db.query(Role.id).filter((Role.code == data.code) | (Role.name == data.name)).first():
            raise ConflictError("Role already exists")
        role = Role(
            code=data.code,
            name=data.name,
            description=data.description,
            permissions=RoleService._load_permissions(db, data.permission_ids),
        )
        db.add(role)
        db.commit()
        db.refresh(role)
        return role

    @staticmethod
    def update_role(db: Session, role_id: int, data: RoleUpdate) -> Role:
        role = RoleService.get_role(db, role_id)
        changes = data.model_dump(exclude_unset=True)
        permission_ids = changes.pop("permission_ids", None)
        if permission_ids is not None:
            role.permissions = RoleService._load_permissions(db, permission_ids)
        for field, value in changes.items():
            setattr(role, field, value)
        db.commit()
        db.refresh(role)
        return role

    @staticmethod
    def delete_role(db: Session, role_id: int) -> None:
        role = RoleService.get_role(db, role_id)
        if db.query(User.id).filter(User.role_id == role_id).first():
            raise BadRequestError("Role is assigned to users and cannot be deleted")
        db.delete(role)
        db.commit()
