"""
Append-only access to complaint status logs.
"""

from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from civicdesk.models.complaint.status_log import StatusLogEntry
from civicdesk.repositories.base.base_repository import BaseRepository


class StatusLogRepository(BaseRepository[StatusLogEntry]):
    """
    Status logs are only ever appended.
    """

    def __init__(self, session: Session):
        super().__init__(StatusLogEntry, session)

    def next_sequence(self, complaint_id: str) -> int:
        stmt = select(func.max(StatusLogEntry.sequence)).where(
            StatusLogEntry.complaint_id == complaint_id
        )
        current = self.db.execute(stmt).scalar_one_or_none()
        return (current or 0) + 1

    def append(self, entry: StatusLogEntry) -> StatusLogEntry:
        """Assign the next per-complaint sequence number and flush."""
        entry.sequence = self.next_sequence(entry.complaint_id)
        return self.add(entry)

    def list_for_complaint(self, complaint_id: str) -> List[StatusLogEntry]:
        stmt = (
            select(StatusLogEntry)
            .where(StatusLogEntry.complaint_id == complaint_id)
            .order_by(StatusLogEntry.sequence)
        )
        return list(self.db.execute(stmt).scalars().all())
