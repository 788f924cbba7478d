"""
Base services module.

This module provides foundational service layer components:
- Base service class with transaction management
- Result handling via ServiceResult
- The notification dispatcher contract
"""

from civicdesk.services.base.base_service import BaseService
from civicdesk.services.base.notification_dispatcher import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    TemplateKind,
    notify_quietly,
)
from civicdesk.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)

__all__ = [
    "BaseService",
    "ErrorCode",
    "ErrorSeverity",
    "LoggingNotificationDispatcher",
    "NotificationDispatcher",
    "ServiceError",
    "ServiceResult",
    "TemplateKind",
    "notify_quietly",
]
