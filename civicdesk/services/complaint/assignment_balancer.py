"""
Least-loaded assignee selection.

Reads are not locked against concurrent creates: two requests can pick
the same person. The imbalance only affects fairness, never correctness.
"""

from typing import List, Optional

from civicdesk.core.logging import get_logger
from civicdesk.models.base.enums import UserRole
from civicdesk.models.user.user import User
from civicdesk.repositories.complaint.complaint_repository import ComplaintRepository
from civicdesk.repositories.user.user_repository import UserRepository

logger = get_logger(__name__)


class AssignmentBalancer:
    """
    Picks the active user of a role in a ward with the fewest open
    complaints; ties go to the oldest account.
    """

    def __init__(self, users: UserRepository, complaints: ComplaintRepository):
        self.users = users
        self.complaints = complaints

    def candidates(self, ward_id: str, role: UserRole) -> List[User]:
        return self.users.find_active_staff(role, ward_id)

    def select_assignee(self, ward_id: str, role: UserRole) -> Optional[User]:
        candidates = self.candidates(ward_id, role)
        if not candidates:
            logger.info(
                "No eligible assignee",
                extra={"ward_id": ward_id, "role": role.value},
            )
            return None

        loads = self.complaints.count_open_by_assignee(role, [user.id for user in candidates])
        # candidates arrive oldest first, and min() keeps the first of equals
        chosen = min(candidates, key=lambda user: loads.get(user.id, 0))
        logger.debug(
            "Selected assignee",
            extra={"ward_id": ward_id, "role": role.value, "assignee_id": chosen.id, "load": loads.get(chosen.id, 0)},
        )
        return chosen
