"""
Complaint request schemas.

Shape and format checks happen here, before any service call; rules that
need the store (ward exists, type is configured) are the service's job.
"""

import re
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from civicdesk.models.base.enums import ComplaintStatus, Priority
from civicdesk.schemas.common.base import BaseCreateSchema, BaseSchema

__all__ = [
    "ComplaintCreate",
    "ComplaintTransitionRequest",
    "ComplaintReopenRequest",
]

_PHONE = re.compile(r"^\+?[0-9][0-9 \-]{6,18}[0-9]$")


def normalize_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _PHONE.match(value):
        raise ValueError("Invalid phone number")
    return re.sub(r"[ \-]", "", value)


class ComplaintCreate(BaseCreateSchema):
    """
    Fields accepted when filing a complaint.

    `captcha_id`/`captcha_answer` are only consulted for submissions
    without an authenticated actor.
    """

    type: str = Field(..., min_length=1, max_length=100, description="Complaint type key")
    description: str = Field(..., min_length=10, max_length=2000)
    ward_id: str = Field(..., min_length=1, max_length=36)
    priority: Priority = Field(default=Priority.MEDIUM)
    title: Optional[str] = Field(default=None, max_length=255)

    area: Optional[str] = Field(default=None, max_length=255)
    landmark: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=1000)

    contact_name: Optional[str] = Field(default=None, max_length=255)
    contact_email: Optional[EmailStr] = Field(default=None)
    contact_phone: Optional[str] = Field(default=None, max_length=20)

    captcha_id: Optional[str] = Field(default=None, max_length=64)
    captcha_answer: Optional[str] = Field(default=None, max_length=16)

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description cannot be empty or whitespace only")
        return v

    @field_validator("contact_phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v)

    @field_validator("contact_email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class ComplaintTransitionRequest(BaseSchema):
    """Target status plus optional assignees supplied in the same call."""

    status: ComplaintStatus
    ward_officer_id: Optional[str] = Field(default=None, max_length=36)
    maintenance_team_id: Optional[str] = Field(default=None, max_length=36)
    comment: Optional[str] = Field(default=None, max_length=1000)


class ComplaintReopenRequest(BaseSchema):
    comment: Optional[str] = Field(default=None, max_length=1000)
