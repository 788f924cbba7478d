"""
Permission and authorization utilities.

The role matrix for the complaint workflow lives here and nowhere else:
each role maps to a set of capabilities, and scope rules (own ward, own
assignment) are applied on top of the capability check.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from civicdesk.core.exceptions import AuthorizationError
from civicdesk.models.base.enums import UserRole


class Capability(str, Enum):
    CREATE_COMPLAINT = "complaint.create"
    VIEW_ANY = "complaint.view_any"
    VIEW_WARD = "complaint.view_ward"
    VIEW_ASSIGNED = "complaint.view_assigned"
    VIEW_OWN = "complaint.view_own"
    TRANSITION_ANY = "complaint.transition_any"
    TRANSITION_WARD = "complaint.transition_ward"
    TRANSITION_ASSIGNED = "complaint.transition_assigned"
    ASSIGN_WARD_OFFICER = "complaint.assign_ward_officer"
    ASSIGN_MAINTENANCE_ANY = "complaint.assign_maintenance_any"
    ASSIGN_MAINTENANCE_WARD = "complaint.assign_maintenance_ward"
    REOPEN = "complaint.reopen"


ROLE_CAPABILITIES: Dict[UserRole, FrozenSet[Capability]] = {
    UserRole.ADMINISTRATOR: frozenset({
        Capability.CREATE_COMPLAINT,
        Capability.VIEW_ANY,
        Capability.TRANSITION_ANY,
        Capability.ASSIGN_WARD_OFFICER,
        Capability.ASSIGN_MAINTENANCE_ANY,
        Capability.REOPEN,
    }),
    UserRole.WARD_OFFICER: frozenset({
        Capability.CREATE_COMPLAINT,
        Capability.VIEW_WARD,
        Capability.TRANSITION_WARD,
        Capability.ASSIGN_MAINTENANCE_WARD,
    }),
    UserRole.MAINTENANCE_TEAM: frozenset({
        Capability.VIEW_ASSIGNED,
        Capability.TRANSITION_ASSIGNED,
    }),
    UserRole.CITIZEN: frozenset({
        Capability.CREATE_COMPLAINT,
        Capability.VIEW_OWN,
    }),
}


@dataclass(frozen=True)
class Principal:
    """
    The acting user as seen by the service layer.

    Attributes:
        user_id: Identifier of the user
        role: User's role
        ward_id: Ward the user belongs to, if any
        is_active: Inactive principals are refused everything
    """
    user_id: str
    role: UserRole
    ward_id: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(user_id=user.id, role=user.role, ward_id=user.ward_id, is_active=user.is_active)

    def has(self, capability: Capability) -> bool:
        return self.is_active and capability in ROLE_CAPABILITIES.get(self.role, frozenset())


def _deny(message: str, rule: str) -> None:
    raise AuthorizationError(message, rule=rule)


def check_transition(actor: Principal, complaint) -> None:
    """
    Raise AuthorizationError unless `actor` may change the status of
    `complaint`.
    """
    if not actor.is_active:
        _deny("Inactive users cannot act on complaints", "actor_active")
    if actor.has(Capability.TRANSITION_ANY):
        return
    if actor.has(Capability.TRANSITION_WARD):
        if complaint.ward_id == actor.ward_id or complaint.ward_officer_id == actor.user_id:
            return
        _deny("Ward officers may only act on complaints in their ward", "ward_scope")
    if actor.has(Capability.TRANSITION_ASSIGNED):
        if complaint.maintenance_team_id == actor.user_id:
            return
        _deny("Maintenance staff may only act on complaints assigned to them", "assignee_scope")
    _deny("Role is not permitted to change complaint status", "role_transition")


def can_transition(actor: Principal, complaint) -> bool:
    try:
        check_transition(actor, complaint)
    except AuthorizationError:
        return False
    return True


def check_assign_ward_officer(actor: Principal) -> None:
    if not actor.has(Capability.ASSIGN_WARD_OFFICER):
        _deny("Only administrators may assign a ward officer", "assign_ward_officer")


def check_assign_maintenance(actor: Principal, target_ward_id: Optional[str]) -> None:
    """
    Administrators may assign anyone; ward officers only staff of their own
    ward.
    """
    if actor.has(Capability.ASSIGN_MAINTENANCE_ANY):
        return
    if actor.has(Capability.ASSIGN_MAINTENANCE_WARD):
        if actor.ward_id is not None and target_ward_id == actor.ward_id:
            return
        _deny("Ward officers may only assign maintenance staff from their own ward", "assignee_ward_scope")
    _deny("Role is not permitted to assign maintenance staff", "assign_maintenance")


def check_reopen(actor: Principal) -> None:
    if not actor.has(Capability.REOPEN):
        _deny("Only administrators may reopen a complaint", "reopen_admin_only")


def check_create(actor: Principal) -> None:
    if not actor.has(Capability.CREATE_COMPLAINT):
        _deny("Role is not permitted to file complaints", "role_create")


def can_view(actor: Principal, complaint) -> bool:
    if actor.has(Capability.VIEW_ANY):
        return True
    if actor.has(Capability.VIEW_WARD) and (
        complaint.ward_id == actor.ward_id or complaint.ward_officer_id == actor.user_id
    ):
        return True
    if actor.has(Capability.VIEW_ASSIGNED) and complaint.maintenance_team_id == actor.user_id:
        return True
    return actor.has(Capability.VIEW_OWN) and complaint.submitted_by_id == actor.user_id
