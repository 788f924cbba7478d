"""
OTP Session Repository
Issuance, lookup, single-use verification and expiry of one-time codes.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from civicdesk.models.auth.otp_session import OTPSession
from civicdesk.models.base.enums import OTPPurpose
from civicdesk.repositories.base.base_repository import BaseRepository


class OTPSessionRepository(BaseRepository[OTPSession]):
    """
    Repository for one-time code sessions.
    """

    def __init__(self, db: Session):
        super().__init__(OTPSession, db)

    def invalidate_live(self, email: str, purpose: OTPPurpose, now: datetime) -> int:
        """
        Force every unverified, unexpired session for (email, purpose) to
        expire. Returns the number of sessions invalidated.
        """
        stmt = (
            update(OTPSession)
            .where(
                func.lower(OTPSession.email) == email.lower(),
                OTPSession.purpose == purpose,
                OTPSession.verified.is_(False),
                OTPSession.expires_at > now,
            )
            .values(expires_at=now - timedelta(seconds=1))
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(stmt).rowcount or 0

    def find_live(self, email: str, purpose: OTPPurpose, now: datetime) -> Optional[OTPSession]:
        """The single live session for (email, purpose), if any."""
        stmt = (
            select(OTPSession)
            .where(
                func.lower(OTPSession.email) == email.lower(),
                OTPSession.purpose == purpose,
                OTPSession.verified.is_(False),
                OTPSession.expires_at > now,
            )
            .order_by(OTPSession.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_latest_by_code(self, email: str, purpose: OTPPurpose, code_hash: str) -> Optional[OTPSession]:
        """Most recent session for (email, purpose) whose code matches, live or not."""
        stmt = (
            select(OTPSession)
            .where(
                func.lower(OTPSession.email) == email.lower(),
                OTPSession.purpose == purpose,
                OTPSession.code_hash == code_hash,
            )
            .order_by(OTPSession.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def mark_verified(self, session_id: str, user_id: str, now: datetime) -> bool:
        """
        Conditionally flip a live session to verified.

        Returns False when another request verified it first or it expired
        in the meantime, so a code can be consumed at most once.
        """
        stmt = (
            update(OTPSession)
            .where(
                OTPSession.id == session_id,
                OTPSession.verified.is_(False),
                OTPSession.expires_at > now,
            )
            .values(verified=True, verified_at=now, bound_user_id=user_id)
            .execution_options(synchronize_session="fetch")
        )
        return (self.db.execute(stmt).rowcount or 0) == 1

    def register_failed_attempt(self, session: OTPSession, now: datetime) -> OTPSession:
        """Count a wrong code; expire the session once attempts are exhausted."""
        session.attempt_count += 1
        if session.attempt_count >= session.max_attempts:
            session.expires_at = now - timedelta(seconds=1)
        self.db.flush()
        return session

    def delete_expired_before(self, cutoff: datetime) -> int:
        """Garbage-collect sessions that expired before `cutoff`."""
        stmt = delete(OTPSession).where(OTPSession.expires_at < cutoff)
        return self.db.execute(stmt).rowcount or 0
