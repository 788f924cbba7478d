"""
Core complaint model with lifecycle and SLA tracking.

A complaint is created once, mutated only through the lifecycle machine
and never physically deleted; CLOSED is a terminal status.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civicdesk.models.base.base_model import BaseModel
from civicdesk.models.base.enums import ComplaintStatus, Priority, SlaStatus
from civicdesk.models.base.mixins import TimestampMixin

if TYPE_CHECKING:
    from civicdesk.models.complaint.status_log import StatusLogEntry
    from civicdesk.models.ward.ward import Ward

__all__ = ["Complaint", "SEQUENCE_CODE_CONSTRAINT"]

SEQUENCE_CODE_CONSTRAINT = "uq_complaints_sequence_code"


class Complaint(BaseModel, TimestampMixin):
    """
    Central complaint entity.

    Attributes:
        sequence_code: Human-readable unique reference (e.g. KSC0007)
        type: Complaint type key from the configured type catalogue
        priority: Complaint priority level
        status: Current lifecycle status
        sla_status: Cached SLA classification; advisory only, recomputed
            whenever the complaint is surfaced
        deadline: Set once at creation from the type's SLA hours
        ward_id: Ward the complaint belongs to
        ward_officer_id: Ward officer responsible for triage
        maintenance_team_id: Maintenance staff member doing the work
        submitted_by_id: Citizen who filed it; null until a guest
            submission is verified
        contact_*: Contact details captured with the submission
        assigned_at / resolved_at / closed_at: Set by the transition
            that causes them
    """

    __tablename__ = "complaints"
    __table_args__ = (
        UniqueConstraint("sequence_code", name=SEQUENCE_CODE_CONSTRAINT),
        Index("ix_complaints_ward_status", "ward_id", "status"),
        Index("ix_complaints_maintenance_status", "maintenance_team_id", "status"),
        Index("ix_complaints_officer_status", "ward_officer_id", "status"),
        Index("ix_complaints_contact_email", "contact_email"),
        {"comment": "Municipal complaints"},
    )

    sequence_code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Unique human-readable complaint reference",
    )

    type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority, name="complaint_priority_enum", native_enum=False, length=16),
        nullable=False,
        default=Priority.MEDIUM,
    )
    status: Mapped[ComplaintStatus] = mapped_column(
        Enum(ComplaintStatus, name="complaint_status_enum", native_enum=False, length=16),
        nullable=False,
        default=ComplaintStatus.REGISTERED,
        index=True,
    )
    sla_status: Mapped[SlaStatus] = mapped_column(
        Enum(SlaStatus, name="sla_status_enum", native_enum=False, length=16),
        nullable=False,
        default=SlaStatus.ON_TIME,
        comment="Advisory cache of the evaluated SLA status",
    )
    deadline: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Location
    ward_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("wards.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    area: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    landmark: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # People
    ward_officer_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    maintenance_team_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    submitted_by_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Contact captured with the submission
    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Lifecycle timestamps
    assigned_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    ward: Mapped["Ward"] = relationship("Ward")
    status_logs: Mapped[List["StatusLogEntry"]] = relationship(
        "StatusLogEntry",
        back_populates="complaint",
        order_by="StatusLogEntry.sequence",
    )

    @property
    def is_bound(self) -> bool:
        return self.submitted_by_id is not None

    def __repr__(self) -> str:
        return f"<Complaint(sequence_code={self.sequence_code!r}, status={self.status})>"
