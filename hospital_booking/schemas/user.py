from pydantic import Field, EmailStr
from typing import List, Optional
from datetime import date, datetime
from hospital_booking.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(default=None, pattern=r"^[0-9]{10,11}$")
    password: str = Field(..., min_length=6)
    gender: Optional[str] = Field(default=None, pattern=r"^(male|female|other)$")
    date_of_birth: Optional[date] = None
    address: Optional[str] = Field(default=None, max_length=200)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class ProfileUpdate(CamelModel):
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone_number: Optional[str] = Field(default=None, pattern=r"^[0-9]{10,11}$")
    gender: Optional[str] = Field(default=None, pattern=r"^(male|female|other)$")
    date_of_birth: Optional[date] = None
    address: Optional[str] = Field(default=None, max_length=200)


class PasswordChange(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class AvatarUpdate(CamelModel):
    avatar_url: str = Field(..., min_length=1, max_length=500)
    avatar_public_id: Optional[str] = None


class UserResponse(CamelModel):
    id: int
    full_name: str
    email: str
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    role_type: str
    role_id: Optional[int] = None
    avatar_url: Optional[str] = None
    is_verified: bool
    is_locked: bool
    hospital_id: Optional[int] = None
    specialty_id: Optional[int] = None
    consultation_fee: float = 0
    created_at: datetime


class UserSummary(CamelModel):
    id: int
    full_name: str
    email: str
    avatar_url: Optional[str] = None


class AuthPayload(CamelModel):
    token: str
    user: UserResponse
    permissions: List[str]


class AdminUserUpdate(CamelModel):
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    role_type: Optional[str] = Field(default=None, pattern=r"^(user|doctor|admin)$")
    role_id: Optional[int] = None
    is_verified: Optional[bool] = None
    hospital_id: Optional[int] = None
    specialty_id: Optional[int] = None
    consultation_fee: Optional[float] = Field(default=None, ge=0)


class PermissionCreate(CamelModel):
    code: str = Field(..., pattern=r"^[a-z_]{3,64}$")
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""


class PermissionResponse(CamelModel):
    id: int
    code: str
    name: str
    description: Optional[str] = ""
    active: bool


class RoleCreate(CamelModel):
    code: str = Field(..., pattern=r"^[a-z_]{3,32}$")
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    permission_ids: List[int] = Field(default_factory=list)


class RoleUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    active: Optional[bool] = None
    permission_ids: Optional[List[int]] = None


class RoleResponse(CamelModel):
    id: int
    code: str
    name: str
    description: Optional[str] = ""
    active: bool
    permissions: List[PermissionResponse]
