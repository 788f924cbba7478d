"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civicdesk.core.exceptions import BaseAppException, ErrorCode
from civicdesk.core.logging import get_logger
from civicdesk.services.base.service_result import (
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)
from civicdesk.utils.datetime_utils import utc_now

Clock = Callable[[], Any]


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Injectable clock so time-dependent rules are testable
    - Conversion of typed exceptions into ServiceResult refusals
    - Transaction management utilities
    """

    def __init__(self, db_session: Session, clock: Optional[Clock] = None):
        """
        Initialize base service.

        Args:
            db_session: SQLAlchemy database session
            clock: Callable returning the current naive-UTC time
        """
        self.db: Session = db_session
        self._clock = clock or utc_now
        self._logger = get_logger(self.__class__.__name__)

    def now(self):
        return self._clock()

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _refuse(self, exception: BaseAppException, operation: str) -> ServiceResult:
        """
        Convert an expected business exception into a refusal.
        """
        self._logger.warning(
            f"{operation} refused: {exception.message}",
            extra={
                "operation": operation,
                "error_code": exception.error_code.value,
                "rule": exception.rule,
                "field": exception.field,
            },
        )
        return ServiceResult.refusal(exception)

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert an unexpected exception to a ServiceResult failure.

        The raw exception text is logged but never placed in the result.

        Args:
            exception: The caught exception
            operation: Description of the operation that failed
            entity_ref: Reference to the entity involved (ID, code, etc.)
            additional_context: Extra context for logging/debugging
        """
        if isinstance(exception, BaseAppException):
            return self._refuse(exception, operation)

        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )

        return ServiceResult.failure(
            ServiceError(
                code=ErrorCode.INTERNAL_ERROR,
                message=f"Failed to {operation}",
                severity=ErrorSeverity.CRITICAL,
                details={"store_error": True} if isinstance(exception, SQLAlchemyError) else None,
            )
        )

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                self.complaints.insert(complaint)
                self.status_logs.append(entry)
                # commit on success, rollback on exception
        """
        try:
            yield self.db
            self._commit()
        except Exception as e:
            self._rollback()
            if isinstance(e, BaseAppException):
                self._logger.debug(f"Transaction rolled back: {e}")
            else:
                self._logger.error(f"Transaction failed: {e}", exc_info=True)
            raise

    def _commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()
        self._logger.debug("Transaction committed successfully")

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except SQLAlchemyError as e:
            # Log but don't raise - rollback errors should not mask original error
            self._logger.warning(f"Rollback failed: {e}")
