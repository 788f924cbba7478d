"""
Core module: logging and the exception hierarchy shared by every layer.
"""

from civicdesk.core.exceptions import (
    AllocationExhaustedError,
    AuthorizationError,
    BaseAppException,
    CaptchaVerificationError,
    ConflictError,
    ErrorCode,
    ExpiredOrUsedCredentialError,
    InvalidCredentialError,
    NotificationDeliveryError,
    PreconditionError,
    ResourceNotFoundError,
    StateError,
    ValidationError,
)
from civicdesk.core.logging import configure_logging, get_logger

__all__ = [
    "AllocationExhaustedError",
    "AuthorizationError",
    "BaseAppException",
    "CaptchaVerificationError",
    "ConflictError",
    "ErrorCode",
    "ExpiredOrUsedCredentialError",
    "InvalidCredentialError",
    "NotificationDeliveryError",
    "PreconditionError",
    "ResourceNotFoundError",
    "StateError",
    "ValidationError",
    "configure_logging",
    "get_logger",
]
