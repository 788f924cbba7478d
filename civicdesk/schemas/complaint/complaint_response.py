"""
Complaint response schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from civicdesk.models.base.enums import ComplaintStatus, Priority, SlaStatus
from civicdesk.schemas.common.base import BaseResponseSchema, BaseSchema

__all__ = [
    "StatusLogResponse",
    "ComplaintResponse",
    "PublicStatusEntry",
    "PublicComplaintView",
]


class StatusLogResponse(BaseSchema):
    sequence: int
    from_status: Optional[ComplaintStatus] = None
    to_status: ComplaintStatus
    actor_id: Optional[str] = None
    comment: Optional[str] = None
    timestamp: datetime


class ComplaintResponse(BaseResponseSchema):
    """Full complaint view for authenticated users."""

    sequence_code: str
    type: str
    title: Optional[str] = None
    description: str
    priority: Priority
    status: ComplaintStatus
    sla_status: SlaStatus = Field(..., description="Evaluated when the complaint was read")
    deadline: datetime

    ward_id: str
    area: Optional[str] = None
    landmark: Optional[str] = None
    address: Optional[str] = None

    ward_officer_id: Optional[str] = None
    maintenance_team_id: Optional[str] = None
    submitted_by_id: Optional[str] = None
    contact_name: Optional[str] = None

    assigned_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None


class PublicStatusEntry(BaseSchema):
    from_status: Optional[ComplaintStatus] = None
    to_status: ComplaintStatus
    comment: Optional[str] = None
    timestamp: datetime


class PublicComplaintView(BaseSchema):
    """
    What a guest sees when tracking a complaint: no internal identifiers
    beyond the sequence code.
    """

    sequence_code: str
    type: str
    status: ComplaintStatus
    priority: Priority
    sla_status: SlaStatus
    deadline: datetime
    ward_name: Optional[str] = None
    area: Optional[str] = None
    submitted_at: datetime
    assigned_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    is_verified: bool
    history: List[PublicStatusEntry] = Field(default_factory=list)
