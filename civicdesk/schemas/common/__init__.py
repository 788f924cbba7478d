from civicdesk.schemas.common.base import (
    BaseCreateSchema,
    BaseDBSchema,
    BaseResponseSchema,
    BaseSchema,
)
from civicdesk.schemas.common.response import ErrorDetail, ErrorResponse, SuccessResponse

__all__ = [
    "BaseCreateSchema",
    "BaseDBSchema",
    "BaseResponseSchema",
    "BaseSchema",
    "ErrorDetail",
    "ErrorResponse",
    "SuccessResponse",
]
