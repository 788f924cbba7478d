"""
Data access layer. Repositories flush but never commit.
"""

from civicdesk.repositories.auth import OTPSessionRepository
from civicdesk.repositories.base import BaseRepository
from civicdesk.repositories.complaint import ComplaintRepository, StatusLogRepository
from civicdesk.repositories.system import SystemConfigRepository
from civicdesk.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ComplaintRepository",
    "OTPSessionRepository",
    "StatusLogRepository",
    "SystemConfigRepository",
    "UserRepository",
]
