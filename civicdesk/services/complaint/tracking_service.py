"""
Public complaint tracking by sequence code and contact details.
"""

from typing import Optional

from sqlalchemy.orm import Session

from civicdesk.config.settings import Settings
from civicdesk.core.exceptions import BaseAppException, ResourceNotFoundError
from civicdesk.models.complaint.complaint import Complaint
from civicdesk.repositories.complaint.complaint_repository import ComplaintRepository
from civicdesk.repositories.user.user_repository import UserRepository
from civicdesk.schemas.complaint.complaint_response import PublicComplaintView, PublicStatusEntry
from civicdesk.services.base.base_service import BaseService, Clock
from civicdesk.services.base.service_result import ServiceResult
from civicdesk.services.complaint.sla_evaluator import SlaEvaluator


class TrackingService(BaseService):
    """
    Lets a complainant look up their complaint without logging in.

    A contact mismatch is reported exactly like an unknown code so the
    endpoint cannot be used to probe which codes exist.
    """

    def __init__(
        self,
        db_session: Session,
        clock: Optional[Clock] = None,
        sla: Optional[SlaEvaluator] = None,
        app_settings: Optional[Settings] = None,
    ):
        super().__init__(db_session, clock)
        self.complaints = ComplaintRepository(db_session)
        self.users = UserRepository(db_session)
        self.sla = sla or SlaEvaluator.from_settings(app_settings)

    def track(
        self,
        sequence_code: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> ServiceResult[PublicComplaintView]:
        try:
            complaint = self.complaints.find_by_sequence_code(sequence_code.strip().upper())
            if complaint is None or not self._contact_matches(complaint, email, phone):
                raise ResourceNotFoundError("Complaint")
            view = self._public_view(complaint)
        except BaseAppException as e:
            return self._refuse(e, "track complaint")
        except Exception as e:
            return self._handle_exception(e, "track complaint", sequence_code)

        return ServiceResult.success(view)

    def _contact_matches(self, complaint: Complaint, email: Optional[str], phone: Optional[str]) -> bool:
        emails = {(complaint.contact_email or "").lower()}
        phones = {complaint.contact_phone or ""}
        if complaint.submitted_by_id:
            submitter = self.users.find_by_id(complaint.submitted_by_id)
            if submitter is not None:
                emails.add(submitter.email.lower())
                phones.add(submitter.phone_number or "")
        emails.discard("")
        phones.discard("")
        if email and email.lower() in emails:
            return True
        return bool(phone) and phone in phones

    def _public_view(self, complaint: Complaint) -> PublicComplaintView:
        return PublicComplaintView(
            sequence_code=complaint.sequence_code,
            type=complaint.type,
            status=complaint.status,
            priority=complaint.priority,
            sla_status=self.sla.evaluate(complaint.deadline, self.now(), complaint.status),
            deadline=complaint.deadline,
            ward_name=complaint.ward.name if complaint.ward is not None else None,
            area=complaint.area,
            submitted_at=complaint.created_at,
            assigned_at=complaint.assigned_at,
            resolved_at=complaint.resolved_at,
            closed_at=complaint.closed_at,
            is_verified=complaint.is_bound,
            history=[
                PublicStatusEntry(
                    from_status=entry.from_status,
                    to_status=entry.to_status,
                    comment=entry.comment,
                    timestamp=entry.timestamp,
                )
                for entry in complaint.status_logs
            ],
        )
