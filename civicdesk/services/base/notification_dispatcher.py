"""
Notification dispatcher contract.

Transport (SMTP, SMS gateway, push) is an external collaborator; the
workflow only needs `send(recipient, template_kind, payload) -> bool`.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

from civicdesk.core.logging import get_logger


class TemplateKind(str, Enum):
    """Notification templates the workflow emits."""

    OTP_CODE = "otp_code"
    STATUS_CHANGED = "status_changed"
    COMPLAINT_ASSIGNED = "complaint_assigned"
    UNASSIGNED_BROADCAST = "unassigned_broadcast"
    VERIFIED_COMPLAINT = "verified_complaint"
    WELCOME = "welcome"


class NotificationDispatcher(ABC):
    """
    Deliver a templated notification to a contact (email or phone).

    Implementations return False (or raise) when delivery failed; callers
    decide whether that failure is fatal.
    """

    @abstractmethod
    def send(self, recipient: str, template_kind: TemplateKind, payload: Dict[str, Any]) -> bool:
        ...


class LoggingNotificationDispatcher(NotificationDispatcher):
    """
    Default dispatcher that records notifications in the application log.
    The OTP code itself is redacted by the log filters.
    """

    def __init__(self):
        self._logger = get_logger(self.__class__.__name__)

    def send(self, recipient: str, template_kind: TemplateKind, payload: Dict[str, Any]) -> bool:
        self._logger.info(
            f"Dispatching {template_kind.value} notification",
            extra={"recipient": recipient, "template": template_kind.value, "payload": dict(payload)},
        )
        return True


def notify_quietly(
    dispatcher: NotificationDispatcher,
    recipient: Optional[str],
    template_kind: TemplateKind,
    payload: Dict[str, Any],
) -> bool:
    """
    Send a notification whose failure must not undo the triggering change.

    Failures are logged and reported through the return value.
    """
    logger = get_logger(__name__)
    if not recipient:
        return False
    try:
        delivered = dispatcher.send(recipient, template_kind, payload)
    except Exception as e:
        logger.error(
            f"Notification {template_kind.value} raised: {e}",
            exc_info=True,
            extra={"template": template_kind.value},
        )
        return False
    if not delivered:
        logger.error(
            f"Notification {template_kind.value} was not delivered",
            extra={"template": template_kind.value},
        )
    return delivered
