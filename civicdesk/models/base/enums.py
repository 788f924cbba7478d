"""
Enumerations shared by models, schemas and services.
"""

import enum


class UserRole(str, enum.Enum):
    """Roles participating in the complaint pipeline."""
    ADMINISTRATOR = "ADMINISTRATOR"
    WARD_OFFICER = "WARD_OFFICER"
    MAINTENANCE_TEAM = "MAINTENANCE_TEAM"
    CITIZEN = "CITIZEN"


class ComplaintStatus(str, enum.Enum):
    """Complaint lifecycle states."""
    REGISTERED = "REGISTERED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    REOPENED = "REOPENED"


class Priority(str, enum.Enum):
    """Complaint priority levels."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class SlaStatus(str, enum.Enum):
    """Derived service-level classification."""
    ON_TIME = "ON_TIME"
    WARNING = "WARNING"
    OVERDUE = "OVERDUE"
    COMPLETED = "COMPLETED"


class OTPPurpose(str, enum.Enum):
    """What a one-time code authorizes."""
    GUEST_VERIFICATION = "GUEST_VERIFICATION"


# Statuses for which the SLA clock has stopped
COMPLETED_STATUSES = frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED})

# Statuses counted as current workload by the assignment balancer
OPEN_STATUSES = frozenset({
    ComplaintStatus.REGISTERED,
    ComplaintStatus.ASSIGNED,
    ComplaintStatus.IN_PROGRESS,
    ComplaintStatus.REOPENED,
})
