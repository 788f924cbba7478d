"""
Standard API response wrappers for success and error.
"""

from typing import Any, Dict, Generic, TypeVar, Union

from pydantic import Field

from civicdesk.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = [
    "SuccessResponse",
    "ErrorDetail",
    "ErrorResponse",
]


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response."""

    success: bool = Field(default=True, description="Success flag")
    message: str = Field(..., description="Response message")
    data: Union[T, None] = Field(default=None, description="Response data")

    @classmethod
    def create(
        cls,
        message: str,
        data: Union[T, None] = None,
    ):
        """Create success response."""
        return cls(success=True, message=message, data=data)


class ErrorDetail(BaseSchema):
    """Refusal details: what kind, and which rule or field."""

    code: str = Field(..., description="Application error code")
    message: str = Field(..., description="Error message")
    rule: Union[str, None] = Field(default=None, description="Violated rule")
    field: Union[str, None] = Field(default=None, description="Offending field")
    details: Union[Dict[str, Any], None] = Field(default=None)


class ErrorResponse(BaseSchema):
    """Standard error response."""

    success: bool = Field(default=False, description="Success flag")
    message: str = Field(..., description="Error message")
    error: ErrorDetail
