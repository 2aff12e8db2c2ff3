"""API request and response schemas."""

from mediatracker.api.schemas.responses import (
    ApiResponse,
    ErrorCode,
    FieldError,
    PaginationMeta,
    ProblemDetail,
    ProblemJSONResponse,
    ValidationProblemDetail,
)

__all__ = [
    "ApiResponse",
    "ErrorCode",
    "FieldError",
    "PaginationMeta",
    "ProblemDetail",
    "ProblemJSONResponse",
    "ValidationProblemDetail",
]
