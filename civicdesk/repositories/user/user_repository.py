"""
User repository: identity lookups and eligible-staff queries.
"""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from civicdesk.models.base.enums import UserRole
from civicdesk.models.user.user import User
from civicdesk.repositories.base.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self, session: Session):
        super().__init__(User, session)

    def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def find_active_staff(self, role: UserRole, ward_id: Optional[str] = None) -> List[User]:
        """
        Active users of `role`, oldest account first.

        With `ward_id` the result is restricted to that ward.
        """
        stmt = select(User).where(User.role == role, User.is_active.is_(True))
        if ward_id is not None:
            stmt = stmt.where(User.ward_id == ward_id)
        stmt = stmt.order_by(User.created_at.asc(), User.id.asc())
        return list(self.db.execute(stmt).scalars().all())
