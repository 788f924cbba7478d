"""
Append-only audit trail of complaint status changes.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civicdesk.models.base.base_model import BaseModel
from civicdesk.models.base.enums import ComplaintStatus
from civicdesk.utils.datetime_utils import utc_now

if TYPE_CHECKING:
    from civicdesk.models.complaint.complaint import Complaint

__all__ = ["StatusLogEntry"]


class StatusLogEntry(BaseModel):
    """
    One row per accepted transition (plus one for identity binding).

    `sequence` totally orders the entries of a single complaint; it is
    assigned in the same transaction as the state mutation. Rows are never
    updated or deleted.
    """

    __tablename__ = "status_logs"
    __table_args__ = (
        UniqueConstraint("complaint_id", "sequence", name="uq_status_logs_complaint_sequence"),
        Index("ix_status_logs_complaint_timestamp", "complaint_id", "timestamp"),
    )

    complaint_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("complaints.id", ondelete="RESTRICT"), nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    from_status: Mapped[Optional[ComplaintStatus]] = mapped_column(
        Enum(ComplaintStatus, name="complaint_status_enum", native_enum=False, length=16),
        nullable=True,
    )
    to_status: Mapped[ComplaintStatus] = mapped_column(
        Enum(ComplaintStatus, name="complaint_status_enum", native_enum=False, length=16),
        nullable=False,
    )
    actor_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)

    complaint: Mapped["Complaint"] = relationship("Complaint", back_populates="status_logs")
