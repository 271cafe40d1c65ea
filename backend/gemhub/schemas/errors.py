# backend/gemhub/schemas/errors.py
"""
Pydantic schemas for error responses.

Every error leaves the API in one of these two shapes; the exception
handlers in main.py build them.
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Service error response (400, 404, 503, 500)."""

    error: str = Field(
        ...,
        description="Exception class name (e.g., 'TransactionNotFoundError')"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict | None = Field(
        default=None,
        description="Additional context, such as the offending field"
    )


class ValidationErrorDetail(BaseModel):
    """Request validation error response (422)."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[dict] = Field(
        ...,
        description="One entry per failed field"
    )
