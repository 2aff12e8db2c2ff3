"""Shared OpenAPI error response definitions (RFC 7807)."""

from __future__ import annotations

from typing import Any

from mediatracker.api.schemas.responses import ProblemDetail, ValidationProblemDetail

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"

ResponsesType = dict[int | str, dict[str, Any]]


def _problem(status: int, description: str, model: type = ProblemDetail) -> ResponsesType:
    return {
        status: {
            "model": model,
            "description": description,
            "content": {PROBLEM_JSON_MEDIA_TYPE: {}},
        }
    }


BAD_REQUEST_RESPONSE = _problem(400, "Bad request")
UNAUTHORIZED_RESPONSE = _problem(401, "Authentication required")
NOT_FOUND_RESPONSE = _problem(404, "Resource not found")
CONFLICT_RESPONSE = _problem(409, "Resource conflict or stale version")
VALIDATION_ERROR_RESPONSE = _problem(422, "Validation error", ValidationProblemDetail)
INTERNAL_ERROR_RESPONSE = _problem(500, "Internal server error")

LIST_ERRORS: ResponsesType = {
    **VALIDATION_ERROR_RESPONSE,
    **UNAUTHORIZED_RESPONSE,
    **INTERNAL_ERROR_RESPONSE,
}
"""Errors for list endpoints (422, 401, 500)."""

GET_ITEM_ERRORS: ResponsesType = {**LIST_ERRORS, **NOT_FOUND_RESPONSE}
"""Errors for single-item reads (404, 422, 401, 500)."""

CREATE_ERRORS: ResponsesType = {**LIST_ERRORS, **BAD_REQUEST_RESPONSE, **CONFLICT_RESPONSE}
"""Errors for create endpoints (400, 409, 422, 401, 500)."""

UPDATE_ERRORS: ResponsesType = {**CREATE_ERRORS, **NOT_FOUND_RESPONSE}
"""Errors for update endpoints (400, 404, 409, 422, 401, 500)."""

DELETE_ERRORS: ResponsesType = GET_ITEM_ERRORS
"""Errors for delete endpoints (404, 422, 401, 500)."""
