"""
Complaint repository: inserts guarded by the sequence-code constraint,
sequence scans, workload counts and lookups.
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from civicdesk.core.exceptions import ConflictError
from civicdesk.models.base.enums import OPEN_STATUSES, UserRole
from civicdesk.models.complaint.complaint import SEQUENCE_CODE_CONSTRAINT, Complaint
from civicdesk.repositories.base.base_repository import BaseRepository


class ComplaintRepository(BaseRepository[Complaint]):
    """
    Data access for complaints.
    """

    # Column holding the assignee for each assignable role
    ASSIGNEE_COLUMNS = {
        UserRole.WARD_OFFICER: Complaint.ward_officer_id,
        UserRole.MAINTENANCE_TEAM: Complaint.maintenance_team_id,
    }

    def __init__(self, session: Session):
        super().__init__(Complaint, session)

    # ==================== Create ====================

    def insert(self, complaint: Complaint) -> Complaint:
        """
        Insert a complaint and flush.

        Raises:
            ConflictError: The sequence code is already taken.
            IntegrityError: Any other constraint violation.
        """
        try:
            return self.add(complaint)
        except IntegrityError as e:
            if self.is_sequence_conflict(e):
                raise ConflictError(
                    "Sequence code already allocated",
                    rule="sequence_code_unique",
                    field="sequence_code",
                ) from e
            raise

    @staticmethod
    def is_sequence_conflict(error: IntegrityError) -> bool:
        """True when the violated constraint is the sequence-code uniqueness."""
        text = str(getattr(error, "orig", error)).lower()
        return SEQUENCE_CODE_CONSTRAINT in text or "complaints.sequence_code" in text

    # ==================== Sequence codes ====================

    def list_sequence_codes(self, prefix: str) -> List[str]:
        """All persisted codes starting with `prefix`."""
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        stmt = select(Complaint.sequence_code).where(
            Complaint.sequence_code.like(f"{escaped}%", escape="\\")
        )
        return list(self.db.execute(stmt).scalars().all())

    # ==================== Lookups ====================

    def find_by_sequence_code(self, sequence_code: str) -> Optional[Complaint]:
        stmt = (
            select(Complaint)
            .options(selectinload(Complaint.status_logs))
            .where(Complaint.sequence_code == sequence_code)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_by_reference(self, reference: str, *, for_update: bool = False) -> Optional[Complaint]:
        """Look up by primary key, then by sequence code."""
        complaint = self.find_by_id(reference, for_update=for_update)
        if complaint is not None:
            return complaint
        stmt = select(Complaint).where(Complaint.sequence_code == reference.strip().upper())
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    # ==================== Workload ====================

    def count_open_by_assignee(self, role: UserRole, user_ids: Iterable[str]) -> Dict[str, int]:
        """
        Number of complaints in an open status per assignee.

        Users with no open complaints are absent from the result.
        """
        ids = list(user_ids)
        column = self.ASSIGNEE_COLUMNS.get(role)
        if column is None or not ids:
            return {}

        stmt = (
            select(column, func.count(Complaint.id))
            .where(column.in_(ids), Complaint.status.in_(list(OPEN_STATUSES)))
            .group_by(column)
        )
        return {user_id: int(total) for user_id, total in self.db.execute(stmt).all()}
