"""
Complaint repositories.
"""

from civicdesk.repositories.complaint.complaint_repository import ComplaintRepository
from civicdesk.repositories.complaint.status_log_repository import StatusLogRepository

__all__ = ["ComplaintRepository", "StatusLogRepository"]
