"""
SLA classification.

The stored `sla_status` column is only a cache; the value returned here is
authoritative and is recomputed whenever a complaint is surfaced.
"""

from datetime import datetime, timedelta
from typing import Optional

from civicdesk.config.settings import Settings, settings as default_settings
from civicdesk.models.base.enums import COMPLETED_STATUSES, ComplaintStatus, SlaStatus

WARNING_WINDOW = timedelta(days=1)


def evaluate_sla(
    deadline: Optional[datetime],
    now: datetime,
    status: ComplaintStatus,
    warning_window: timedelta = WARNING_WINDOW,
) -> SlaStatus:
    """
    Classify a complaint against its deadline.

    COMPLETED for resolved or closed complaints regardless of deadline;
    otherwise OVERDUE once `now` is past the deadline, WARNING when the
    deadline is at most `warning_window` away, else ON_TIME.
    """
    if status in COMPLETED_STATUSES:
        return SlaStatus.COMPLETED
    if deadline is None:
        return SlaStatus.ON_TIME
    if now > deadline:
        return SlaStatus.OVERDUE
    if deadline - now <= warning_window:
        return SlaStatus.WARNING
    return SlaStatus.ON_TIME


class SlaEvaluator:
    """Callable wrapper so the warning window can be configured once."""

    def __init__(self, warning_window: timedelta = WARNING_WINDOW):
        self.warning_window = warning_window

    @classmethod
    def from_settings(cls, app_settings: Optional[Settings] = None) -> "SlaEvaluator":
        app_settings = app_settings or default_settings
        return cls(timedelta(hours=app_settings.SLA_WARNING_WINDOW_HOURS))

    def evaluate(self, deadline: Optional[datetime], now: datetime, status: ComplaintStatus) -> SlaStatus:
        return evaluate_sla(deadline, now, status, self.warning_window)

    def refresh(self, complaint, now: datetime) -> SlaStatus:
        """Overwrite the cached column on `complaint` and return the value."""
        complaint.sla_status = self.evaluate(complaint.deadline, now, complaint.status)
        return complaint.sla_status
