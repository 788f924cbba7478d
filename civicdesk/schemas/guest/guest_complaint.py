"""
Guest (unauthenticated) submission, verification and tracking schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from civicdesk.models.base.enums import UserRole
from civicdesk.schemas.common.base import BaseSchema
from civicdesk.schemas.complaint.complaint_base import ComplaintCreate, normalize_phone
from civicdesk.schemas.complaint.complaint_response import ComplaintResponse

__all__ = [
    "GuestComplaintSubmit",
    "GuestSubmitResponse",
    "GuestVerifyRequest",
    "GuestVerifyResponse",
    "GuestResendRequest",
    "OTPIssuedResponse",
    "CitizenSummary",
    "TrackComplaintQuery",
]


class GuestComplaintSubmit(ComplaintCreate):
    """A complaint plus the contact details the code is sent to."""

    contact_name: str = Field(..., min_length=2, max_length=255)
    contact_email: EmailStr


class GuestSubmitResponse(BaseSchema):
    complaint_id: str
    sequence_code: str
    otp_session_id: str
    otp_expires_at: datetime


class GuestVerifyRequest(BaseSchema):
    email: EmailStr
    code: str = Field(..., min_length=4, max_length=10)
    complaint_id: str = Field(..., description="Complaint id or sequence code")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("code")
    @classmethod
    def digits_only(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError("Code must be numeric")
        return v


class GuestResendRequest(BaseSchema):
    email: EmailStr
    complaint_id: str = Field(..., description="Complaint id or sequence code")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class OTPIssuedResponse(BaseSchema):
    otp_session_id: str
    otp_expires_at: datetime


class CitizenSummary(BaseSchema):
    id: str
    email: str
    full_name: str
    role: UserRole


class GuestVerifyResponse(BaseSchema):
    user: CitizenSummary
    complaint: ComplaintResponse
    is_new_user: bool


class TrackComplaintQuery(BaseSchema):
    """Either contact detail identifies the complainant."""

    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v)

    @model_validator(mode="after")
    def require_contact(self) -> "TrackComplaintQuery":
        if not self.email and not self.phone:
            raise ValueError("Provide the email or phone number used when filing")
        return self
