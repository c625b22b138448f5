"""
Base response schemas for standardized results.

Every public operation of the booking engine answers with the same
``{success, message, data}`` envelope, whether called in-process or over HTTP.
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ServiceResult(BaseModel, Generic[T]):
    """Standard result envelope for engine operations."""

    success: bool = Field(default=True, description="Operation success status")
    message: Optional[str] = Field(default=None, description="Human-readable message")
    data: Optional[T] = Field(default=None, description="Operation payload")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Booking approved",
                "data": {"booking_id": "01J9Z3Y6G2M3Q4R5S6T7V8W9X0"},
            }
        }
    )


class ErrorResponse(BaseModel):
    """Failure envelope returned at the HTTP boundary."""

    success: bool = Field(default=False, description="Always false")
    message: str = Field(description="Human-readable error message")
    code: Optional[str] = Field(default=None, description="Error code for programmatic handling")
    details: Dict[str, Any] = Field(default_factory=dict, description="Structured error context")
