"""
ORM models. Importing this package registers every table on `Base.metadata`.
"""

from civicdesk.models.auth import OTPSession
from civicdesk.models.base import Base, BaseModel
from civicdesk.models.complaint import Complaint, StatusLogEntry
from civicdesk.models.system import SystemConfig
from civicdesk.models.user import User
from civicdesk.models.ward import Ward

__all__ = [
    "Base",
    "BaseModel",
    "Complaint",
    "OTPSession",
    "StatusLogEntry",
    "SystemConfig",
    "User",
    "Ward",
]
