"""
One-time code sessions used to bind guest submissions to an identity.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from civicdesk.models.base.base_model import BaseModel
from civicdesk.models.base.enums import OTPPurpose
from civicdesk.models.base.mixins import TimestampMixin

__all__ = ["OTPSession"]


class OTPSession(BaseModel, TimestampMixin):
    """
    One-time code session.

    At most one unverified, unexpired session exists per (email, purpose):
    issuing a new one forces `expires_at` of the others into the past.
    A session is mutated once on verification (or on attempt exhaustion)
    and otherwise expires implicitly; expiry is a timestamp comparison at
    read time.
    """

    __tablename__ = "otp_sessions"
    __table_args__ = (
        Index("ix_otp_sessions_email_purpose", "email", "purpose", "verified"),
        Index("ix_otp_sessions_expires_at", "expires_at"),
        {"comment": "One-time code verification sessions"},
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    code_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="HMAC-SHA256 digest of the code",
    )
    purpose: Mapped[OTPPurpose] = mapped_column(
        Enum(OTPPurpose, name="otp_purpose_enum", native_enum=False, length=32),
        nullable=False,
    )
    complaint_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("complaints.id", ondelete="CASCADE"), nullable=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    attempt_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_attempts: Mapped[int] = mapped_column(Integer, default=5, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    bound_user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.attempt_count)
