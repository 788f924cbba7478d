"""
Background cleanup service.

Periodic sweep of expired, short-lived data:
- OTP sessions past expiry plus the retention window
- Expired CAPTCHA challenges held in memory

Expiry is always checked at read time, so skipping or delaying a sweep
never changes behaviour; it only reclaims space.
"""

import time
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from civicdesk.config.settings import settings
from civicdesk.repositories.auth.otp_session_repository import OTPSessionRepository
from civicdesk.services.base.base_service import BaseService, Clock
from civicdesk.services.base.service_result import ServiceResult
from civicdesk.services.captcha.captcha_service import CaptchaService, get_captcha_service


class CleanupTask(str, Enum):
    """Enumeration of available cleanup tasks."""
    OTP_SESSIONS = "otp_sessions"
    CAPTCHA_CHALLENGES = "captcha_challenges"


@dataclass
class CleanupConfig:
    """Configuration for cleanup operations."""
    otp_retention_hours: int = settings.OTP_RETENTION_HOURS


@dataclass
class CleanupResult:
    """Result of a single cleanup task."""
    task: CleanupTask
    count: int
    success: bool
    duration_ms: float
    error: Optional[str] = None


class CleanupService(BaseService):
    """
    Runs each cleanup task independently; one failing task does not stop
    the others.
    """

    def __init__(
        self,
        db_session: Session,
        captcha: Optional[CaptchaService] = None,
        config: Optional[CleanupConfig] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db_session, clock)
        self.otp_sessions = OTPSessionRepository(db_session)
        self.captcha = captcha or get_captcha_service()
        self.config = config or CleanupConfig()

    def run(self, tasks: Optional[List[CleanupTask]] = None) -> ServiceResult[Dict[str, Any]]:
        """
        Execute cleanup tasks.

        Args:
            tasks: Specific tasks to run (all tasks if None)

        Returns:
            ServiceResult with per-task counts
        """
        results = [self._execute(task) for task in (tasks or list(CleanupTask))]
        failed = [r.task.value for r in results if not r.success]
        total = sum(r.count for r in results if r.success)

        response = {
            "total_cleaned": total,
            "failed_tasks": failed,
            "details": {
                r.task.value: {"count": r.count, "success": r.success, "duration_ms": round(r.duration_ms, 2)}
                for r in results
            },
        }
        if failed:
            self._logger.warning(f"Cleanup completed with failures: {failed}")
        else:
            self._logger.info(f"Cleanup completed. Total items cleaned: {total}")
        return ServiceResult.success(response, message=f"Cleanup completed: {total} items cleaned")

    def _execute(self, task: CleanupTask) -> CleanupResult:
        start = time.perf_counter()
        try:
            if task == CleanupTask.OTP_SESSIONS:
                count = self.cleanup_otp_sessions()
            else:
                count = self.captcha.purge_expired()
        except Exception as e:
            self._logger.error(f"Cleanup task {task.value} failed: {e}", exc_info=True)
            return CleanupResult(task, 0, False, (time.perf_counter() - start) * 1000, type(e).__name__)
        return CleanupResult(task, count, True, (time.perf_counter() - start) * 1000)

    def cleanup_otp_sessions(self) -> int:
        """Delete sessions whose expiry is older than the retention window."""
        cutoff = self.now() - timedelta(hours=self.config.otp_retention_hours)
        with self.transaction():
            deleted = self.otp_sessions.delete_expired_before(cutoff)
        self._logger.debug(f"Purged {deleted} OTP sessions expired before {cutoff.isoformat()}")
        return deleted
