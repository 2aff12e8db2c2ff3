"""Centralized exception handlers for FastAPI with RFC 7807 compliance.

Converts domain and API exceptions into Problem Details responses
(``application/problem+json``) so every error the API returns has the
same shape: type, title, status, detail, instance, code and request id,
plus field-level ``errors`` for validation failures.

RFC 7807 Reference: https://tools.ietf.org/html/rfc7807
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from mediatracker.api.middleware.request_id import get_request_id
from mediatracker.api.schemas.responses import (
    ERROR_TITLES,
    ErrorCode,
    FieldError,
    ProblemDetail,
    ProblemJSONResponse,
    ValidationProblemDetail,
    get_error_type_uri,
)
from mediatracker.exceptions import (
    APIError,
    AuthenticationError,
    RepositoryError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_DETAIL_LENGTH = 4096
TRUNCATION_SUFFIX = "... (truncated)"


def _truncate_detail(detail: str) -> str:
    if len(detail) <= MAX_DETAIL_LENGTH:
        return detail
    return detail[: MAX_DETAIL_LENGTH - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX


def _request_id(request: Request | None = None) -> str:
    """Request id from context, then request.state, else "-"."""
    request_id = get_request_id()
    if request_id:
        return request_id
    if request is not None:
        state_request_id = getattr(request.state, "request_id", None)
        if state_request_id:
            return str(state_request_id)
    return "-"


def _problem_response(
    code: ErrorCode,
    status: int,
    detail: str,
    request: Request,
    headers: dict[str, str] | None = None,
) -> ProblemJSONResponse:
    problem = ProblemDetail(
        type=get_error_type_uri(code),
        title=ERROR_TITLES.get(code, "Error"),
        status=status,
        detail=_truncate_detail(detail),
        instance=str(request.url.path),
        code=code.value,
        request_id=_request_id(request),
    )
    return ProblemJSONResponse(
        content=problem.model_dump(), status_code=status, headers=headers
    )


def _validation_response(
    detail: str, errors: list[FieldError], request: Request
) -> ProblemJSONResponse:
    problem = ValidationProblemDetail(
        type=get_error_type_uri(ErrorCode.VALIDATION_ERROR),
        title=ERROR_TITLES[ErrorCode.VALIDATION_ERROR],
        status=422,
        detail=_truncate_detail(detail),
        instance=str(request.url.path),
        code=ErrorCode.VALIDATION_ERROR.value,
        request_id=_request_id(request),
        errors=errors,
    )
    return ProblemJSONResponse(
        content=problem.model_dump(exclude_none=True), status_code=422
    )


# =============================================================================
# Exception Handlers
# =============================================================================


async def api_error_handler(request: Request, exc: APIError) -> ProblemJSONResponse:
    """Handle APIError subclasses (404, 400, 409)."""
    fields = exc.to_problem_detail(str(request.url.path), _request_id(request))
    fields["detail"] = _truncate_detail(fields["detail"])
    problem = ProblemDetail(**fields)
    return ProblemJSONResponse(content=problem.model_dump(), status_code=exc.status_code)


async def domain_validation_error_handler(
    request: Request, exc: ValidationError
) -> ProblemJSONResponse:
    """Handle core ValidationError as a 422 with one field error.

    The location is ``query`` for reads and ``body`` for writes; the error
    type is ``<field>.<rule>`` (e.g. ``rating.step``).
    """
    logger.debug("Rejected request: %s", exc.message)
    field = exc.field_name or "__root__"
    source = "query" if request.method == "GET" else "body"
    error = FieldError(
        loc=[source, field],
        msg=exc.message,
        type=f"{field}.{exc.rule or 'invalid'}",
        allowed=exc.allowed_values,
    )
    return _validation_response(exc.message, [error], request)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> ProblemJSONResponse:
    """Handle FastAPI/Pydantic request validation failures."""
    errors: list[FieldError] = []
    for error in exc.errors():
        raw: dict[str, Any] = dict(error)
        errors.append(
            FieldError(
                loc=[part for part in raw.get("loc", []) if isinstance(part, (str, int))],
                msg=str(raw.get("msg", "")),
                type=str(raw.get("type", "")),
            )
        )
    return _validation_response("Request validation failed", errors, request)


async def auth_error_handler(
    request: Request, exc: AuthenticationError
) -> ProblemJSONResponse:
    """Handle AuthenticationError as 401 with a Bearer challenge."""
    challenge = 'Bearer error="invalid_token"' if exc.expired else "Bearer"
    return _problem_response(
        ErrorCode.NOT_AUTHENTICATED,
        401,
        exc.message,
        request,
        headers={"WWW-Authenticate": challenge},
    )


async def repository_error_handler(
    request: Request, exc: RepositoryError
) -> ProblemJSONResponse:
    """Handle RepositoryError with a generic detail; the cause is logged."""
    logger.error(
        "Repository error: %s (operation=%s, entity=%s)",
        exc.message,
        exc.operation,
        exc.entity_type,
        exc_info=exc.original_error or exc,
    )
    return _problem_response(
        ErrorCode.DATABASE_ERROR, 500, "A database error occurred", request
    )


async def generic_error_handler(request: Request, exc: Exception) -> ProblemJSONResponse:
    """Catch-all: log the stack trace, return a generic 500."""
    logger.exception("Unhandled exception: %s", exc)
    return _problem_response(
        ErrorCode.INTERNAL_ERROR, 500, "An unexpected error occurred", request
    )


# =============================================================================
# Handler Registration
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""
    app.add_exception_handler(APIError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ValidationError, domain_validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AuthenticationError, auth_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RepositoryError, repository_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_error_handler)
