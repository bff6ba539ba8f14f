from typing import Optional, Set
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from werkzeug.security import generate_password_hash, check_password_hash
from hospital_booking.config import settings

ALL_PERMISSIONS = (
    "view_patients",
    "update_medical_records",
    "schedule_appointments",
    "view_own_profile",
    "book_appointments",
    "view_own_records",
    "manage_users",
    "manage_roles",
    "manage_permissions",
    "manage_coupons",
    "manage_medications",
    "manage_catalog",
    "manage_appointments",
)

USER_PERMISSIONS = frozenset({"view_own_profile", "book_appointments", "view_own_records"})
DOCTOR_PERMISSIONS = USER_PERMISSIONS | {"view_patients", "update_medical_records", "schedule_appointments"}

# Used when a user has no Role record assigned
DEFAULT_ROLE_PERMISSIONS = {
    "user": USER_PERMISSIONS,
    "doctor": DOCTOR_PERMISSIONS,
    "admin": frozenset(ALL_PERMISSIONS),
}

_serializer = URLSafeTimedSerializer(settings.secret_key, salt="auth-token")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def create_token(user_id: int, role_type: str) -> str:
    return _serializer.dumps({"id": user_id, "role": role_type})


def decode_token(token: str, max_age: Optional[int] = None) -> Optional[dict]:
    """Returns the token payload, or None when the token is forged or expired."""
    try:
        return _serializer.loads(token, max_age=max_age or settings.token_max_age)
    except (SignatureExpired, BadSignature):
        return None


def resolve_permissions(user) -> Set[str]:
    """Every permission code granted to ``user``."""
    if user.role_type == "admin":
        return set(ALL_PERMISSIONS)
    role = user.role
    if role is not None and role.active:
        return {p.code for p in role.permissions if p.active}
    return set(DEFAULT_ROLE_PERMISSIONS.get(user.role_type, ()))
