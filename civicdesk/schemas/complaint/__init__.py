from civicdesk.schemas.complaint.complaint_base import (
    ComplaintCreate,
    ComplaintReopenRequest,
    ComplaintTransitionRequest,
)
from civicdesk.schemas.complaint.complaint_response import (
    ComplaintResponse,
    PublicComplaintView,
    PublicStatusEntry,
    StatusLogResponse,
)

__all__ = [
    "ComplaintCreate",
    "ComplaintReopenRequest",
    "ComplaintResponse",
    "ComplaintTransitionRequest",
    "PublicComplaintView",
    "PublicStatusEntry",
    "StatusLogResponse",
]
