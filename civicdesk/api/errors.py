"""
Mapping of refusals and application exceptions onto HTTP responses.
"""

from typing import Optional, TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from civicdesk.core.exceptions import STATUS_BY_CODE, BaseAppException
from civicdesk.core.logging import get_logger
from civicdesk.schemas.common.response import ErrorDetail, ErrorResponse
from civicdesk.services.base.service_result import ServiceError, ServiceResult

logger = get_logger(__name__)

T = TypeVar("T")


class ServiceRefusal(Exception):
    """Carries a failed ServiceResult out of a route handler."""

    def __init__(self, error: ServiceError):
        super().__init__(error.message)
        self.error = error


def unwrap_or_raise(result: ServiceResult[T]) -> T:
    if not result.is_success:
        raise ServiceRefusal(result.error)
    return result.data


def _error_response(
    code: str,
    message: str,
    status_code: int,
    rule: Optional[str] = None,
    field: Optional[str] = None,
    details: Optional[dict] = None,
) -> JSONResponse:
    body = ErrorResponse(
        message=message,
        error=ErrorDetail(code=code, message=message, rule=rule, field=field, details=details),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ServiceRefusal)
    async def service_refusal_handler(request: Request, exc: ServiceRefusal) -> JSONResponse:
        error = exc.error
        return _error_response(
            error.code.value,
            error.message,
            STATUS_BY_CODE.get(error.code, 500),
            rule=error.rule,
            field=error.field,
            details=error.details,
        )

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
        logger.warning(
            f"Request refused: {exc.message}",
            extra={"error_code": exc.error_code.value, "rule": exc.rule},
        )
        return _error_response(
            exc.error_code.value,
            exc.message,
            exc.status_code,
            rule=exc.rule,
            field=exc.field,
            details=exc.details or None,
        )
