"""
Complaint lifecycle state machine.

Owns the transition table, per-transition preconditions, assignee
validation, lifecycle timestamps and the status log. Every method runs
inside the caller's transaction and raises a typed exception to refuse;
nothing is committed here.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from civicdesk.core.exceptions import (
    PreconditionError,
    StateError,
    ValidationError,
)
from civicdesk.core.logging import get_logger
from civicdesk.models.base.enums import ComplaintStatus, UserRole
from civicdesk.models.complaint.complaint import Complaint
from civicdesk.models.complaint.status_log import StatusLogEntry
from civicdesk.models.user.user import User
from civicdesk.repositories.complaint.status_log_repository import StatusLogRepository
from civicdesk.repositories.user.user_repository import UserRepository
from civicdesk.services.common.permissions import (
    Principal,
    check_assign_maintenance,
    check_assign_ward_officer,
    check_reopen,
    check_transition,
)
from civicdesk.services.complaint.sla_evaluator import SlaEvaluator

logger = get_logger(__name__)

S = ComplaintStatus

TRANSITIONS: Dict[ComplaintStatus, FrozenSet[ComplaintStatus]] = {
    S.REGISTERED: frozenset({S.ASSIGNED}),
    S.ASSIGNED: frozenset({S.IN_PROGRESS}),
    S.IN_PROGRESS: frozenset({S.RESOLVED}),
    S.RESOLVED: frozenset({S.CLOSED}),
    S.CLOSED: frozenset(),
    S.REOPENED: frozenset({S.ASSIGNED}),
}

# Targets that need a maintenance-team member on the complaint
REQUIRES_MAINTENANCE_TEAM = frozenset({S.ASSIGNED, S.IN_PROGRESS})


def allowed_targets(status: ComplaintStatus) -> FrozenSet[ComplaintStatus]:
    return TRANSITIONS.get(status, frozenset())


def is_allowed(source: ComplaintStatus, target: ComplaintStatus) -> bool:
    return target in allowed_targets(source)


@dataclass
class AssignmentFields:
    """Optional assignee changes supplied with a transition."""
    ward_officer_id: Optional[str] = None
    maintenance_team_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.ward_officer_id is None and self.maintenance_team_id is None


@dataclass
class TransitionOutcome:
    """What an accepted transition changed, for notification after commit."""
    complaint: Complaint
    from_status: Optional[ComplaintStatus]
    to_status: ComplaintStatus
    log_entry: StatusLogEntry
    newly_assigned: List[User] = field(default_factory=list)


class LifecycleMachine:
    """
    Validates and applies complaint state changes.
    """

    def __init__(
        self,
        users: UserRepository,
        status_logs: StatusLogRepository,
        sla_evaluator: Optional[SlaEvaluator] = None,
    ):
        self.users = users
        self.status_logs = status_logs
        self.sla_evaluator = sla_evaluator or SlaEvaluator.from_settings()

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def transition(
        self,
        complaint: Complaint,
        target: ComplaintStatus,
        actor: Principal,
        now: datetime,
        assignment: Optional[AssignmentFields] = None,
        comment: Optional[str] = None,
    ) -> TransitionOutcome:
        """
        Move `complaint` to `target`.

        Raises:
            AuthorizationError: Actor may not act on this complaint or
                make the requested assignment.
            StateError: Edge not in the transition table.
            PreconditionError: Required maintenance-team member missing.
            ValidationError: Assignee missing, inactive or of the wrong role.
        """
        source = complaint.status
        check_transition(actor, complaint)

        if target == S.REOPENED:
            raise StateError(
                "Complaints are reopened through the reopen operation",
                rule="reopen_dedicated_operation",
                field="status",
            )
        if not is_allowed(source, target):
            raise StateError(
                f"Transition {source.value} -> {target.value} is not allowed",
                rule="transition_table",
                field="status",
                details={
                    "from_status": source.value,
                    "to_status": target.value,
                    "allowed": sorted(s.value for s in allowed_targets(source)),
                },
            )

        newly_assigned = self._apply_assignment(complaint, actor, assignment or AssignmentFields())

        if target in REQUIRES_MAINTENANCE_TEAM and not complaint.maintenance_team_id:
            raise PreconditionError(
                f"A maintenance team member is required to move to {target.value}",
                rule="maintenance_team_required",
                field="maintenance_team_id",
            )

        # SLA is judged against the deadline as it stood before this change
        complaint.sla_status = self.sla_evaluator.evaluate(complaint.deadline, now, target)
        complaint.status = target
        self._stamp(complaint, target, now)

        entry = self._log(complaint, source, target, actor.user_id, now, comment)
        logger.info(
            "Complaint transitioned",
            extra={
                "sequence_code": complaint.sequence_code,
                "from_status": source.value,
                "to_status": target.value,
                "actor_id": actor.user_id,
            },
        )
        return TransitionOutcome(complaint, source, target, entry, newly_assigned)

    def reopen(
        self,
        complaint: Complaint,
        actor: Principal,
        now: datetime,
        comment: Optional[str] = None,
    ) -> TransitionOutcome:
        """
        CLOSED -> REOPENED, administrators only.

        Clears the maintenance assignment and lifecycle timestamps; the
        deadline is left untouched.
        """
        check_reopen(actor)
        source = complaint.status
        if source != S.CLOSED:
            raise StateError(
                "Only closed complaints can be reopened",
                rule="reopen_from_closed",
                field="status",
                details={"from_status": source.value},
            )

        complaint.maintenance_team_id = None
        complaint.assigned_at = None
        complaint.resolved_at = None
        complaint.closed_at = None
        complaint.status = S.REOPENED
        self.sla_evaluator.refresh(complaint, now)

        entry = self._log(complaint, source, S.REOPENED, actor.user_id, now, comment or "Complaint reopened")
        logger.info(
            "Complaint reopened",
            extra={"sequence_code": complaint.sequence_code, "actor_id": actor.user_id},
        )
        return TransitionOutcome(complaint, source, S.REOPENED, entry)

    # ------------------------------------------------------------------ #
    # Log entries outside the transition table
    # ------------------------------------------------------------------ #

    def record_creation(
        self,
        complaint: Complaint,
        actor_id: Optional[str],
        now: datetime,
        comment: str = "Complaint registered",
    ) -> StatusLogEntry:
        return self._log(complaint, None, complaint.status, actor_id, now, comment)

    def record_binding(
        self,
        complaint: Complaint,
        user_id: str,
        now: datetime,
        comment: str = "Complaint verified and registered",
    ) -> StatusLogEntry:
        return self._log(complaint, complaint.status, complaint.status, user_id, now, comment)

    # ------------------------------------------------------------------ #
    # Assignment
    # ------------------------------------------------------------------ #

    def validate_assignee(self, user_id: str, role: UserRole, field_name: str) -> User:
        """
        Raises:
            ValidationError: Unknown user, inactive user or role mismatch.
        """
        user = self.users.find_by_id(user_id)
        if user is None:
            raise ValidationError("Assignee not found", field=field_name, rule="assignee_exists")
        if not user.is_active:
            raise ValidationError("Assignee is not active", field=field_name, rule="assignee_active")
        if user.role != role:
            raise ValidationError(
                f"Assignee must have role {role.value}",
                field=field_name,
                rule="assignee_role",
            )
        return user

    def _apply_assignment(
        self,
        complaint: Complaint,
        actor: Principal,
        assignment: AssignmentFields,
    ) -> List[User]:
        """Validate every requested assignee before mutating anything."""
        if assignment.is_empty:
            return []

        officer = None
        maintainer = None
        if assignment.ward_officer_id is not None:
            check_assign_ward_officer(actor)
            officer = self.validate_assignee(assignment.ward_officer_id, UserRole.WARD_OFFICER, "ward_officer_id")
        if assignment.maintenance_team_id is not None:
            maintainer = self.validate_assignee(
                assignment.maintenance_team_id, UserRole.MAINTENANCE_TEAM, "maintenance_team_id"
            )
            check_assign_maintenance(actor, maintainer.ward_id)

        newly_assigned: List[User] = []
        if officer is not None and complaint.ward_officer_id != officer.id:
            complaint.ward_officer_id = officer.id
            newly_assigned.append(officer)
        if maintainer is not None and complaint.maintenance_team_id != maintainer.id:
            complaint.maintenance_team_id = maintainer.id
            newly_assigned.append(maintainer)
        return newly_assigned

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _stamp(complaint: Complaint, target: ComplaintStatus, now: datetime) -> None:
        if target == S.ASSIGNED and complaint.assigned_at is None:
            complaint.assigned_at = now
        elif target == S.RESOLVED and complaint.resolved_at is None:
            complaint.resolved_at = now
        elif target == S.CLOSED and complaint.closed_at is None:
            complaint.closed_at = now

    def _log(
        self,
        complaint: Complaint,
        source: Optional[ComplaintStatus],
        target: ComplaintStatus,
        actor_id: Optional[str],
        now: datetime,
        comment: Optional[str],
    ) -> StatusLogEntry:
        entry = StatusLogEntry(
            complaint_id=complaint.id,
            from_status=source,
            to_status=target,
            actor_id=actor_id,
            comment=comment,
            timestamp=now,
        )
        return self.status_logs.append(entry)
