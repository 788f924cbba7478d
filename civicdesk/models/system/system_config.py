"""
Key/value system configuration rows, read-only to the workflow engine.
"""

from typing import Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from civicdesk.models.base.base_model import BaseModel
from civicdesk.models.base.mixins import TimestampMixin

__all__ = ["SystemConfig"]


class SystemConfig(BaseModel, TimestampMixin):
    """
    Administrator-maintained settings.

    Known keys: COMPLAINT_ID_PREFIX, COMPLAINT_ID_START_NUMBER,
    COMPLAINT_ID_LENGTH, AUTO_ASSIGN_COMPLAINTS, DEFAULT_SLA_HOURS,
    OTP_EXPIRY_MINUTES and one COMPLAINT_TYPE_<ID> row per complaint type
    holding JSON such as {"name": "Water Supply", "slaHours": 24}.
    """

    __tablename__ = "system_configs"

    key: Mapped[str] = mapped_column(String(120), unique=True, nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
