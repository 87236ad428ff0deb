# cleancloak/models/cleaner_profile.py
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional
from bson import ObjectId
from pydantic import AfterValidator, AliasChoices, BeforeValidator, Field
from cleancloak.models.common import (
    CamelModel, OptionalEmail, PyObjectId, PHONE_MESSAGE, is_phone,
)
from cleancloak.utils.sanitize import clean_bio, clean_short_text


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _required_text(value: str) -> str:
    if not value.strip():
        raise ValueError("This field is required")
    return value


def _optional_phone(value: Optional[str]) -> Optional[str]:
    if value and not is_phone(value):
        raise ValueError(PHONE_MESSAGE)
    return value


# Text is sanitized before any other check sees it.
ShortText = Annotated[str, BeforeValidator(clean_short_text)]
RequiredText = Annotated[str, BeforeValidator(clean_short_text), AfterValidator(_required_text)]
Bio = Annotated[str, BeforeValidator(clean_bio)]
CleanEmail = Annotated[OptionalEmail, BeforeValidator(clean_short_text)]
MpesaPhone = Annotated[Optional[str], AfterValidator(_optional_phone)]


class CleanerProfileUpdate(CamelModel):
    """
    Fields a cleaner may edit on their own profile.
    Approval status, verification, history, rating and job counts are not
    part of this model, so any such keys in a request body are dropped.
    """
    first_name: Optional[RequiredText] = None
    last_name: Optional[RequiredText] = None
    phone: Optional[str] = None
    email: CleanEmail = None
    address: Optional[ShortText] = None
    city: Optional[ShortText] = None
    bio: Optional[Bio] = None
    services: Optional[List[str]] = None
    is_available: Optional[bool] = None
    mpesa_phone_number: MpesaPhone = None
    profile_image: Optional[str] = None
    passport_photo: Optional[str] = None
    full_body_photo: Optional[str] = None
    portfolio_images: Optional[List[str]] = None


class CleanerProfileCreate(CleanerProfileUpdate):
    first_name: RequiredText
    last_name: RequiredText


def _ref_from_id(value):
    if isinstance(value, (ObjectId, str)):
        return {"_id": value}
    return value


class UserRef(CamelModel):
    """Account details shown next to a profile. Holds only the id until populated."""
    id: PyObjectId = Field(validation_alias=AliasChoices("_id", "id"))
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    profile_image: Optional[str] = None


PopulatedUser = Annotated[UserRef, BeforeValidator(_ref_from_id)]


class ApprovalHistoryEntry(CamelModel):
    status: ApprovalStatus
    notes: str = ""
    admin: PopulatedUser
    changed_at: datetime


class CleanerProfileOut(CamelModel):
    id: PyObjectId = Field(validation_alias=AliasChoices("_id", "id"))
    user: PopulatedUser
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    email: Optional[str] = None
    address: str = ""
    city: str = ""
    bio: str = ""
    services: List[str] = Field(default_factory=list)
    is_available: bool = True
    mpesa_phone_number: Optional[str] = None
    profile_image: Optional[str] = None
    passport_photo: Optional[str] = None
    full_body_photo: Optional[str] = None
    portfolio_images: List[str] = Field(default_factory=list)
    rating: float = 0
    completed_jobs: int = 0
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    verified: bool = False
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    approval_notes: str = ""
    approval_history: List[ApprovalHistoryEntry] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def profile_out(doc: dict) -> dict:
    return CleanerProfileOut.model_validate(doc).to_json()
