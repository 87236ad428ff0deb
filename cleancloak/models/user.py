# cleancloak/models/user.py
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional
from pydantic import AfterValidator, AliasChoices, BeforeValidator, Field, field_validator
from cleancloak.models.common import (
    CamelModel, OptionalEmail, PyObjectId, PHONE_MESSAGE, is_phone,
)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6


class UserRole(str, Enum):
    CLIENT = "client"
    CLEANER = "cleaner"
    TEAM_LEADER = "team_leader"
    ADMIN = "admin"


def _check_name(value: str) -> str:
    value = value.strip()
    if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
        raise ValueError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )
    return value


def _check_phone(value: str) -> str:
    if not is_phone(value):
        raise ValueError(PHONE_MESSAGE)
    return value


def _check_role(value):
    if value is None:
        return UserRole.CLIENT
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError:
        raise ValueError("Role must be client, cleaner, team_leader, or admin")


Name = Annotated[str, AfterValidator(_check_name)]
Phone = Annotated[str, AfterValidator(_check_phone)]
Role = Annotated[UserRole, BeforeValidator(_check_role)]


class RegisterRequest(CamelModel):
    name: Name
    phone: Phone
    password: str
    role: Role = UserRole.CLIENT

    @field_validator("password")
    def validate_password(cls, v):
        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        return v


class LoginRequest(CamelModel):
    identifier: str = Field("", validate_default=True)
    password: str = Field("", validate_default=True)

    @field_validator("identifier")
    def validate_identifier(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Phone number or name is required")
        return v

    @field_validator("password")
    def validate_password(cls, v):
        if not v:
            raise ValueError("Password is required")
        return v


class UserUpdateRequest(CamelModel):
    name: Optional[Name] = None
    email: OptionalEmail = None
    phone: Optional[Phone] = None
    profile_image: Optional[str] = None


class DeviceTokenRequest(CamelModel):
    device_token: str = Field("", validate_default=True)

    @field_validator("device_token")
    def validate_device_token(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Device token is required")
        return v


class UserPublic(CamelModel):
    """The only user shape returned by the auth endpoints."""
    id: PyObjectId = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    phone: str
    role: UserRole = UserRole.CLIENT


class UserProfileOut(UserPublic):
    email: Optional[str] = None
    profile_image: str = ""
    is_active: bool = True
    device_tokens: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


def public_user(doc: dict) -> dict:
    return UserPublic.model_validate(doc).to_json()


def user_profile(doc: dict) -> dict:
    return UserProfileOut.model_validate(doc).to_json()
