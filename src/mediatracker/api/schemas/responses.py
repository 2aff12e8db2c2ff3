"""API response envelope schemas."""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from starlette.responses import JSONResponse


class ErrorCode(str, Enum):
    """Standardized error codes for API responses.

    4xx Client Errors:
        NOT_FOUND: Resource does not exist, is deleted, or is not yours (404)
        BAD_REQUEST: Invalid request parameters (400)
        VALIDATION_ERROR: Request validation failed (422)
        NOT_AUTHENTICATED: Authentication required (401)
        CONFLICT: Resource conflict or stale version (409)

    5xx Server Errors:
        INTERNAL_ERROR: Unexpected server error (500)
        DATABASE_ERROR: Database operation failed (500)
    """

    # 4xx Client Errors
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    CONFLICT = "CONFLICT"

    # 5xx Server Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


# RFC 7807 Constants and Utilities
ERROR_TYPE_BASE: str = "https://api.mediatracker.dev/errors"
"""Base URI for constructing RFC 7807 type URIs."""


def get_error_type_uri(code: ErrorCode) -> str:
    """Generate RFC 7807 type URI from error code.

    Examples
    --------
    >>> get_error_type_uri(ErrorCode.NOT_FOUND)
    'https://api.mediatracker.dev/errors/NOT_FOUND'
    """
    return f"{ERROR_TYPE_BASE}/{code.value}"


# RFC 7807 Error Title Mapping
ERROR_TITLES: dict[ErrorCode, str] = {
    ErrorCode.NOT_FOUND: "Resource Not Found",
    ErrorCode.BAD_REQUEST: "Bad Request",
    ErrorCode.VALIDATION_ERROR: "Validation Error",
    ErrorCode.NOT_AUTHENTICATED: "Authentication Required",
    ErrorCode.CONFLICT: "Resource Conflict",
    ErrorCode.INTERNAL_ERROR: "Internal Server Error",
    ErrorCode.DATABASE_ERROR: "Database Error",
}
"""Mapping from ErrorCode to human-readable RFC 7807 title."""

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""

    model_config = ConfigDict(strict=True)

    total: int  # Total items matching query
    page: int  # 1-based page number
    page_size: int  # Items per page
    has_more: bool  # More items available (page * page_size < total)


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T
    pagination: PaginationMeta | None = None


# RFC 7807 Problem Details Models


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response for API errors.

    Attributes
    ----------
    type : str
        URI identifying the problem type.
    title : str
        Short human-readable summary of the problem type.
    status : int
        HTTP status code (4xx or 5xx).
    detail : str
        Human-readable explanation of the specific problem occurrence.
    instance : str
        URI reference of the specific occurrence.
    code : str
        Application-specific error code from ErrorCode enum.
    request_id : str
        Unique request identifier for correlation and debugging.
    """

    type: str = Field(
        ...,
        description="URI identifying the problem type",
        examples=["https://api.mediatracker.dev/errors/NOT_FOUND"],
    )
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., ge=400, le=599, description="HTTP status code")
    detail: str = Field(
        ...,
        description="Human-readable explanation of the problem",
        examples=["MediaEntry '3f0c...' not found"],
    )
    instance: str = Field(
        ...,
        description="URI reference of the specific occurrence",
        examples=["/api/v1/entries/3f0c2a9e-7d1b-4c55-9a7e-0c1b2d3e4f50"],
    )
    code: str = Field(..., description="Application-specific error code")
    request_id: str = Field(..., description="Unique request identifier")


class FieldError(BaseModel):
    """Individual field validation error for RFC 7807 validation responses.

    Attributes
    ----------
    loc : list[str | int]
        Location of the error as a field path (e.g., ["body", "rating"]).
    msg : str
        Human-readable error message.
    type : str
        Error type identifier (e.g., "rating.step").
    allowed : list[str] | None
        Accepted tokens when the field is a closed set.
    """

    loc: list[str | int] = Field(
        ...,
        description="Location of the error (field path)",
        examples=[["query", "type"]],
    )
    msg: str = Field(..., description="Error message")
    type: str = Field(..., description="Error type identifier")
    allowed: list[str] | None = Field(
        default=None,
        description="Accepted values for closed-set fields",
        examples=[["Movie", "Series"]],
    )


class ValidationProblemDetail(ProblemDetail):
    """RFC 7807 Problem Details with field-level errors for 422 responses."""

    errors: list[FieldError] = Field(
        ...,
        description="List of field-level validation errors",
    )


class ProblemJSONResponse(JSONResponse):
    """JSONResponse subclass for RFC 7807 Problem Details."""

    media_type = "application/problem+json"
