from civicdesk.models.complaint.complaint import SEQUENCE_CODE_CONSTRAINT, Complaint
from civicdesk.models.complaint.status_log import StatusLogEntry

__all__ = ["Complaint", "SEQUENCE_CODE_CONSTRAINT", "StatusLogEntry"]
