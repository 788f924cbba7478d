"""
Complaint workflow service.

Orchestrates sequence allocation, the lifecycle machine, assignment and
SLA evaluation for the public operations: create, transition, reopen and
read. Each operation runs as one unit of work and returns a ServiceResult;
notifications go out only after the unit of work has committed.
"""

import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from civicdesk.config.settings import Settings, settings as default_settings
from civicdesk.core.exceptions import (
    AllocationExhaustedError,
    AuthorizationError,
    BaseAppException,
    ConflictError,
    ResourceNotFoundError,
    ValidationError,
)
from civicdesk.models.base.enums import ComplaintStatus, SlaStatus, UserRole
from civicdesk.models.complaint.complaint import Complaint
from civicdesk.models.user.user import User
from civicdesk.models.ward.ward import Ward
from civicdesk.repositories.complaint.complaint_repository import ComplaintRepository
from civicdesk.repositories.complaint.status_log_repository import StatusLogRepository
from civicdesk.repositories.user.user_repository import UserRepository
from civicdesk.schemas.complaint.complaint_base import ComplaintCreate
from civicdesk.services.base.base_service import BaseService, Clock
from civicdesk.services.base.notification_dispatcher import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    TemplateKind,
    notify_quietly,
)
from civicdesk.services.base.service_result import ServiceResult
from civicdesk.services.captcha.captcha_service import CaptchaService, get_captcha_service
from civicdesk.services.common.permissions import Principal, can_view, check_create
from civicdesk.services.complaint.assignment_balancer import AssignmentBalancer
from civicdesk.services.complaint.lifecycle_machine import (
    AssignmentFields,
    LifecycleMachine,
    TransitionOutcome,
)
from civicdesk.services.complaint.sequence_allocator import SequenceAllocator
from civicdesk.services.complaint.sla_evaluator import SlaEvaluator
from civicdesk.services.system.config_provider import ComplaintType, ConfigProvider, DatabaseConfigProvider

# Runs inside the create transaction after the complaint row is flushed;
# raising rolls the complaint back.
OnCreated = Callable[[Complaint], None]


@dataclass
class CreationOutcome:
    complaint: Complaint
    attempts: int
    assigned_officer: Optional[User] = None
    broadcast_to: List[User] = field(default_factory=list)


class WorkflowService(BaseService):
    """
    Entry point for complaint state changes.
    """

    def __init__(
        self,
        db_session: Session,
        *,
        config: Optional[ConfigProvider] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        captcha: Optional[CaptchaService] = None,
        clock: Optional[Clock] = None,
        app_settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(db_session, clock)
        self.settings = app_settings or default_settings
        self.config = config or DatabaseConfigProvider(db_session, self.settings)
        self.dispatcher = dispatcher or LoggingNotificationDispatcher()
        self.captcha = captcha or get_captcha_service()
        self._sleep = sleep
        self._rng = rng or random.Random()

        self.complaints = ComplaintRepository(db_session)
        self.users = UserRepository(db_session)
        self.status_logs = StatusLogRepository(db_session)

        self.allocator = SequenceAllocator(self.complaints)
        self.sla = SlaEvaluator.from_settings(self.settings)
        self.lifecycle = LifecycleMachine(self.users, self.status_logs, self.sla)
        self.balancer = AssignmentBalancer(self.users, self.complaints)

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_complaint(
        self,
        data: ComplaintCreate,
        actor: Optional[Principal] = None,
        on_created: Optional[OnCreated] = None,
    ) -> ServiceResult[Complaint]:
        """
        File a new complaint.

        Without an actor the submission is public: a CAPTCHA answer is
        consumed first and contact details are required. The insert is
        retried on a sequence-code collision up to SEQUENCE_MAX_RETRIES
        times before giving up with ALLOCATION_EXHAUSTED.

        Args:
            data: Validated complaint fields
            actor: Authenticated filer, or None for public submissions
            on_created: Hook run in the same transaction once the row exists

        Returns:
            ServiceResult containing the committed complaint
        """
        try:
            if actor is None:
                self.captcha.require(data.captcha_id, data.captcha_answer)
                if not data.contact_email and not data.contact_phone:
                    raise ValidationError(
                        "Contact email or phone is required for public submissions",
                        field="contact_email",
                        rule="contact_required",
                    )
            else:
                check_create(actor)

            complaint_type = self.config.resolve_type(data.type)
            self._require_active_ward(data.ward_id)

            outcome = self._create_with_retry(data, actor, complaint_type, on_created)
        except BaseAppException as e:
            return self._refuse(e, "create complaint")
        except Exception as e:
            return self._handle_exception(e, "create complaint", data.ward_id)

        self._notify_created(outcome)
        return ServiceResult.success(
            outcome.complaint,
            message="Complaint registered",
            metadata={
                "sequence_code": outcome.complaint.sequence_code,
                "attempts": outcome.attempts,
                "auto_assigned": outcome.assigned_officer is not None,
            },
        )

    def _create_with_retry(
        self,
        data: ComplaintCreate,
        actor: Optional[Principal],
        complaint_type: ComplaintType,
        on_created: Optional[OnCreated],
    ) -> CreationOutcome:
        max_attempts = self.settings.SEQUENCE_MAX_RETRIES
        for attempt in range(1, max_attempts + 1):
            try:
                with self.transaction():
                    outcome = self._insert_complaint(data, actor, complaint_type, on_created)
                outcome.attempts = attempt
                return outcome
            except AllocationExhaustedError:
                raise
            except ConflictError as e:
                self._logger.warning(
                    "Sequence code collision, retrying",
                    extra={"attempt": attempt, "max_attempts": max_attempts, "rule": e.rule},
                )
                if attempt < max_attempts:
                    self._sleep(self._retry_delay(attempt))

        self._logger.error(
            "Sequence code allocation exhausted",
            extra={"max_attempts": max_attempts},
        )
        raise AllocationExhaustedError(
            "Could not allocate a complaint reference, please try again",
            rule="sequence_allocation_bounded",
            details={"attempts": max_attempts},
        )

    def _retry_delay(self, attempt: int) -> float:
        """Jittered linear backoff in seconds."""
        base = self.settings.SEQUENCE_RETRY_BASE_DELAY_MS / 1000.0
        return base * attempt * self._rng.uniform(0.5, 1.5)

    def _insert_complaint(
        self,
        data: ComplaintCreate,
        actor: Optional[Principal],
        complaint_type: ComplaintType,
        on_created: Optional[OnCreated],
    ) -> CreationOutcome:
        now = self.now()
        sequence_code = self.allocator.allocate(self.config.sequence_format())

        complaint = Complaint(
            sequence_code=sequence_code,
            type=complaint_type.type_id,
            title=data.title,
            description=data.description,
            priority=data.priority,
            status=ComplaintStatus.REGISTERED,
            deadline=now + timedelta(hours=complaint_type.sla_hours),
            ward_id=data.ward_id,
            area=data.area,
            landmark=data.landmark,
            address=data.address,
            submitted_by_id=actor.user_id if actor is not None else None,
            contact_name=data.contact_name,
            contact_email=data.contact_email,
            contact_phone=data.contact_phone,
            created_at=now,
            updated_at=now,
        )
        self.sla.refresh(complaint, now)
        self.complaints.insert(complaint)
        self.lifecycle.record_creation(complaint, actor.user_id if actor is not None else None, now)

        outcome = CreationOutcome(complaint=complaint, attempts=1)
        if self.config.auto_assign_enabled():
            officer = self.balancer.select_assignee(complaint.ward_id, UserRole.WARD_OFFICER)
            if officer is not None:
                complaint.ward_officer_id = officer.id
                outcome.assigned_officer = officer
            else:
                outcome.broadcast_to = self._broadcast_recipients(complaint.ward_id)
            self.db.flush()

        if on_created is not None:
            on_created(complaint)

        self._logger.info(
            "Complaint created",
            extra={
                "sequence_code": sequence_code,
                "complaint_type": complaint_type.type_id,
                "ward_id": complaint.ward_id,
                "public": actor is None,
            },
        )
        return outcome

    def _broadcast_recipients(self, ward_id: str) -> List[User]:
        """
        Active staff of the ward who can pick up the complaint.

        Administrators stand in only when the ward has no active staff,
        so an unassigned complaint always reaches someone.
        """
        recipients = self.users.find_active_staff(UserRole.MAINTENANCE_TEAM, ward_id)
        return recipients or self.users.find_active_staff(UserRole.ADMINISTRATOR)

    def _require_active_ward(self, ward_id: str) -> Ward:
        ward = self.db.get(Ward, ward_id)
        if ward is None or not ward.is_active:
            raise ValidationError("Ward not found or inactive", field="ward_id", rule="ward_active")
        return ward

    # -------------------------------------------------------------------------
    # Transition / reopen
    # -------------------------------------------------------------------------

    def transition_complaint(
        self,
        complaint_id: str,
        target: ComplaintStatus,
        actor: Principal,
        assignment: Optional[AssignmentFields] = None,
        comment: Optional[str] = None,
    ) -> ServiceResult[Complaint]:
        """
        Apply one lifecycle transition.

        State, timestamps and the status log entry commit together or not
        at all; a refusal leaves the complaint untouched.
        """
        try:
            with self.transaction():
                complaint = self.complaints.get_by_id(complaint_id, for_update=True)
                outcome = self.lifecycle.transition(
                    complaint, target, actor, self.now(), assignment, comment
                )
        except BaseAppException as e:
            return self._refuse(e, "transition complaint")
        except Exception as e:
            return self._handle_exception(e, "transition complaint", complaint_id)

        self._notify_transition(outcome)
        return ServiceResult.success(
            outcome.complaint,
            message=f"Complaint moved to {outcome.to_status.value}",
            metadata={"from_status": outcome.from_status.value, "to_status": outcome.to_status.value},
        )

    def reopen_complaint(
        self,
        complaint_id: str,
        actor: Principal,
        comment: Optional[str] = None,
    ) -> ServiceResult[Complaint]:
        """CLOSED -> REOPENED; administrators only, deadline preserved."""
        try:
            with self.transaction():
                complaint = self.complaints.get_by_id(complaint_id, for_update=True)
                outcome = self.lifecycle.reopen(complaint, actor, self.now(), comment)
        except BaseAppException as e:
            return self._refuse(e, "reopen complaint")
        except Exception as e:
            return self._handle_exception(e, "reopen complaint", complaint_id)

        self._notify_transition(outcome)
        return ServiceResult.success(outcome.complaint, message="Complaint reopened")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def evaluate_sla(self, complaint: Complaint, now: Optional[datetime] = None) -> SlaStatus:
        return self.sla.evaluate(complaint.deadline, now or self.now(), complaint.status)

    def get_complaint(self, complaint_id: str, actor: Principal) -> ServiceResult[Complaint]:
        """
        Surface a complaint with its SLA status recomputed.

        The cached column is rewritten only when the value changed.
        """
        try:
            with self.transaction():
                complaint = self.complaints.find_by_reference(complaint_id)
                if complaint is None:
                    raise ResourceNotFoundError("Complaint")
                if not can_view(actor, complaint):
                    raise AuthorizationError("Not permitted to view this complaint", rule="view_scope")
                current = self.evaluate_sla(complaint)
                if complaint.sla_status != current:
                    complaint.sla_status = current
        except BaseAppException as e:
            return self._refuse(e, "get complaint")
        except Exception as e:
            return self._handle_exception(e, "get complaint", complaint_id)

        return ServiceResult.success(complaint)

    # -------------------------------------------------------------------------
    # Notifications (post-commit, failures logged only)
    # -------------------------------------------------------------------------

    def submitter_contact(self, complaint: Complaint) -> Optional[str]:
        if complaint.submitted_by_id:
            user = self.users.find_by_id(complaint.submitted_by_id)
            if user is not None:
                return user.email
        return complaint.contact_email or complaint.contact_phone

    def _notify_created(self, outcome: CreationOutcome) -> None:
        complaint = outcome.complaint
        payload = {
            "sequence_code": complaint.sequence_code,
            "type": complaint.type,
            "priority": complaint.priority.value,
            "deadline": complaint.deadline.isoformat(),
        }
        if outcome.assigned_officer is not None:
            notify_quietly(self.dispatcher, outcome.assigned_officer.email, TemplateKind.COMPLAINT_ASSIGNED, payload)
        for user in outcome.broadcast_to:
            notify_quietly(self.dispatcher, user.email, TemplateKind.UNASSIGNED_BROADCAST, payload)

    def _notify_transition(self, outcome: TransitionOutcome) -> None:
        complaint = outcome.complaint
        payload = {
            "sequence_code": complaint.sequence_code,
            "from_status": outcome.from_status.value if outcome.from_status else None,
            "to_status": outcome.to_status.value,
            "comment": outcome.log_entry.comment,
        }
        notify_quietly(self.dispatcher, self.submitter_contact(complaint), TemplateKind.STATUS_CHANGED, payload)
        for user in outcome.newly_assigned:
            notify_quietly(self.dispatcher, user.email, TemplateKind.COMPLAINT_ASSIGNED, payload)
