"""
Base models package.

Provides the declarative base, mixins and enums for all database models.
"""

from civicdesk.models.base.base_model import Base, BaseModel
from civicdesk.models.base.enums import (
    COMPLETED_STATUSES,
    OPEN_STATUSES,
    ComplaintStatus,
    OTPPurpose,
    Priority,
    SlaStatus,
    UserRole,
)
from civicdesk.models.base.mixins import TimestampMixin

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "COMPLETED_STATUSES",
    "OPEN_STATUSES",
    "ComplaintStatus",
    "OTPPurpose",
    "Priority",
    "SlaStatus",
    "UserRole",
]
