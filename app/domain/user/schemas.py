from datetime import datetime
from typing import Annotated
from pydantic import EmailStr, Field, StringConstraints
from app.domain.schema_base import CamelModel
from .models import Role

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, max_length=31)]


class UserOut(CamelModel):
    email: str
    name: str
    photo_url: str = Field("", alias="photoURL")
    phone: str = ""
    role: Role
    is_premium: bool
    is_blocked: bool
    issue_count: int
    created_at: datetime
    updated_at: datetime

class StaffOut(CamelModel):
    email: str
    name: str
    photo_url: str = Field("", alias="photoURL")
    phone: str = ""
    role: Role
    is_blocked: bool
    created_at: datetime

class UserRegister(CamelModel):
    email: EmailStr
    name: str | None = None
    photo_url: str | None = Field(None, alias="photoURL")

class ProfileUpdate(CamelModel):
    name: str | None = None
    photo_url: str | None = Field(None, alias="photoURL")
    phone: Phone | None = None

class RoleUpdate(CamelModel):
    role: Role

class AdminSetup(CamelModel):
    email: str | None = None
    secret: str | None = None

class StaffCreate(CamelModel):
    name: NonEmptyStr
    email: EmailStr
    password: NonEmptyStr
    phone: Phone = ""
    photo_url: str = Field("", alias="photoURL")

class StaffUpdate(CamelModel):
    name: str | None = None
    phone: Phone | None = None
    photo_url: str | None = Field(None, alias="photoURL")
    password: str | None = None
    is_blocked: bool | None = None


class UserResponse(CamelModel):
    success: bool = True
    message: str | None = None
    user: UserOut

class UserListResponse(CamelModel):
    success: bool = True
    users: list[UserOut]
    count: int

class StaffListResponse(CamelModel):
    success: bool = True
    staff: list[StaffOut]

class BlockResponse(CamelModel):
    success: bool = True
    message: str
    is_blocked: bool

class MessageResponse(CamelModel):
    success: bool = True
    message: str
