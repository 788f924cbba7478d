"""
Date and time utilities.

All persisted timestamps are naive UTC. Values arriving with tzinfo are
converted before they are compared or stored.
"""

from datetime import datetime, timezone
from typing import Optional


class DateTimeHelper:
    """Timestamp normalization helpers"""

    @staticmethod
    def utc_now() -> datetime:
        """Current time as naive UTC"""
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
        """Convert an aware datetime to naive UTC; naive values pass through"""
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)


utc_now = DateTimeHelper.utc_now
to_naive_utc = DateTimeHelper.to_naive_utc
