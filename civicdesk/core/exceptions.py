"""
Custom Exceptions for the complaint workflow engine.

Exceptions are raised inside a unit of work to force a rollback and are
converted into structured refusals at the service boundary. Each one
carries an error code, the rule or field it concerns, and the HTTP status
the API layer should use.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    CONFLICT = "CONFLICT"
    ALLOCATION_EXHAUSTED = "ALLOCATION_EXHAUSTED"
    INVALID_STATE = "INVALID_STATE"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    CREDENTIAL_EXPIRED_OR_USED = "CREDENTIAL_EXPIRED_OR_USED"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    CAPTCHA_FAILED = "CAPTCHA_FAILED"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        rule: Optional[str] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.rule = rule
        self.field = field
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


class ValidationError(BaseAppException):
    """Malformed or missing input, caught before any write"""
    error_code = ErrorCode.VALIDATION_ERROR
    status_code = 422


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""
    error_code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, resource_type: str = "Resource", message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} not found",
            details={"resource_type": resource_type},
        )


class AuthorizationError(BaseAppException):
    """Role or ownership mismatch; never retried automatically"""
    error_code = ErrorCode.AUTHORIZATION_ERROR
    status_code = 403


class ConflictError(BaseAppException):
    """Sequence code collision detected on insert"""
    error_code = ErrorCode.CONFLICT
    status_code = 409


class AllocationExhaustedError(ConflictError):
    """Sequence code could not be allocated within the retry bound"""
    error_code = ErrorCode.ALLOCATION_EXHAUSTED
    status_code = 503


class StateError(BaseAppException):
    """Illegal transition or unmet precondition"""
    error_code = ErrorCode.INVALID_STATE
    status_code = 409


class PreconditionError(StateError):
    error_code = ErrorCode.PRECONDITION_FAILED


class ExpiredOrUsedCredentialError(BaseAppException):
    """One-time code already verified, invalidated or past expiry"""
    error_code = ErrorCode.CREDENTIAL_EXPIRED_OR_USED
    status_code = 410


class InvalidCredentialError(BaseAppException):
    """One-time code does not match any live session"""
    error_code = ErrorCode.INVALID_CREDENTIAL
    status_code = 400


class CaptchaVerificationError(BaseAppException):
    error_code = ErrorCode.CAPTCHA_FAILED
    status_code = 400


class NotificationDeliveryError(BaseAppException):
    """The notification dispatcher reported a failed send"""
    error_code = ErrorCode.EXTERNAL_SERVICE_ERROR
    status_code = 502


STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.AUTHORIZATION_ERROR: 403,
    ErrorCode.CONFLICT: 409,
    ErrorCode.ALLOCATION_EXHAUSTED: 503,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.PRECONDITION_FAILED: 409,
    ErrorCode.CREDENTIAL_EXPIRED_OR_USED: 410,
    ErrorCode.INVALID_CREDENTIAL: 400,
    ErrorCode.CAPTCHA_FAILED: 400,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
}
