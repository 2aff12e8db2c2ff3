"""
Custom exceptions for the mediatracker application.

This module defines the domain exceptions raised by the core (validation,
repository and authentication failures) and the API-layer exceptions that
map directly onto HTTP status codes.
"""

from __future__ import annotations

from typing import Any, Sequence

from mediatracker.api.schemas.responses import (
    ERROR_TITLES,
    ErrorCode,
    get_error_type_uri,
)


class MediaTrackerError(Exception):
    """Base exception for all mediatracker errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize MediaTrackerError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class ValidationError(MediaTrackerError):
    """
    Exception raised when a write request or list filter is invalid.

    Raised for empty titles, ratings that break the rating rule, and enum
    tokens outside their closed set. Callers can recover by correcting
    the input; it is never logged as a fault.

    Attributes
    ----------
    message : str
        Human-readable error message.
    field_name : str | None
        The name of the field that failed validation.
    invalid_value : object
        The value that failed validation.
    rule : str | None
        Short machine-readable name of the failed rule (e.g. "range").
    allowed_values : list[str] | None
        The accepted tokens, for closed-set fields.

    Examples
    --------
    >>> try:
    ...     validate_rating(Decimal("7.3"))
    ... except ValidationError as e:
    ...     print(f"Invalid {e.field_name}: {e.rule}")
    Invalid rating: step
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field_name: str | None = None,
        invalid_value: object = None,
        rule: str | None = None,
        allowed_values: Sequence[str] | None = None,
    ) -> None:
        """
        Initialize ValidationError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Validation failed").
        field_name : str | None, optional
            The name of the field that failed validation (default: None).
        invalid_value : object, optional
            The value that failed validation (default: None).
        rule : str | None, optional
            Name of the failed rule (default: None).
        allowed_values : Sequence[str] | None, optional
            Accepted tokens for closed-set fields (default: None).
        """
        self.field_name: str | None = field_name
        self.invalid_value: object = invalid_value
        self.rule: str | None = rule
        self.allowed_values: list[str] | None = (
            list(allowed_values) if allowed_values is not None else None
        )
        super().__init__(message)


class RepositoryError(MediaTrackerError):
    """
    Exception raised for repository/database operation failures.

    Attributes
    ----------
    message : str
        Human-readable error message.
    operation : str | None
        The database operation that failed (e.g., "insert", "update", "delete").
    entity_type : str | None
        The type of entity involved (e.g., "MediaEntry", "Tag").
    original_error : Exception | None
        The original database exception that caused this error.
    """

    def __init__(
        self,
        message: str = "Repository operation failed",
        operation: str | None = None,
        entity_type: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize RepositoryError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Repository operation failed").
        operation : str | None, optional
            The database operation that failed (default: None).
        entity_type : str | None, optional
            The type of entity involved (default: None).
        original_error : Exception | None, optional
            The original database exception (default: None).
        """
        self.operation: str | None = operation
        self.entity_type: str | None = entity_type
        self.original_error: Exception | None = original_error
        super().__init__(message)


class AuthenticationError(MediaTrackerError):
    """
    Exception raised when a caller's identity cannot be established.

    Covers missing bearer tokens, bad signatures, expired tokens and
    failed logins.

    Attributes
    ----------
    message : str
        Human-readable error message.
    expired : bool
        Whether the access token has expired.
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        expired: bool = False,
    ) -> None:
        """
        Initialize AuthenticationError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Authentication failed").
        expired : bool, optional
            Whether the access token has expired (default: False).
        """
        self.expired: bool = expired
        super().__init__(message)


# =============================================================================
# API Layer Exceptions
# =============================================================================


class APIError(MediaTrackerError):
    """Base exception for API layer errors.

    Attributes
    ----------
    status_code : int
        HTTP status code for the error response (default: 500).
    error_code : ErrorCode
        Machine-readable error code for API consumers.
    message : str
        Human-readable error message.
    details : dict[str, Any] | None
        Additional error context (e.g., resource_type, identifier).
    """

    status_code: int = 500
    _error_code_value: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def error_code(self) -> ErrorCode:
        """Get the error code as an ErrorCode enum."""
        return ErrorCode(self._error_code_value)

    def to_problem_detail(self, instance: str, request_id: str) -> dict[str, Any]:
        """Convert to RFC 7807 Problem Detail dictionary.

        Parameters
        ----------
        instance : str
            URI reference of the specific occurrence (e.g., "/api/v1/entries/<id>").
        request_id : str
            Unique request identifier for correlation and debugging.

        Returns
        -------
        dict[str, Any]
            Dictionary with RFC 7807 fields suitable for ProblemDetail model.
        """
        return {
            "type": get_error_type_uri(self.error_code),
            "title": ERROR_TITLES.get(self.error_code, "Error"),
            "status": self.status_code,
            "detail": self.message,
            "instance": instance,
            "code": self.error_code.value,
            "request_id": request_id,
        }


class NotFoundError(APIError):
    """Resource not found (404).

    Raised for ids that do not exist, belong to another user, or point at
    a soft-deleted row. The three cases are deliberately indistinguishable.

    Examples
    --------
    >>> raise NotFoundError(resource_type="MediaEntry", identifier=str(entry_id))
    """

    status_code: int = 404
    _error_code_value: str = "NOT_FOUND"

    def __init__(
        self,
        resource_type: str,
        identifier: str,
        hint: str | None = None,
    ) -> None:
        """
        Initialize NotFoundError.

        Parameters
        ----------
        resource_type : str
            The type of resource that was not found (e.g., "MediaEntry").
        identifier : str
            The identifier used to look up the resource.
        hint : str | None, optional
            Additional hint for the user (default: None).
        """
        self.resource_type = resource_type
        self.identifier = identifier
        message = f"{resource_type} '{identifier}' not found"
        if hint:
            message += f". {hint}"
        super().__init__(
            message=message,
            details={"resource_type": resource_type, "identifier": identifier},
        )


class BadRequestError(APIError):
    """Invalid request parameters (400)."""

    status_code: int = 400
    _error_code_value: str = "BAD_REQUEST"


class ConflictError(APIError):
    """Resource conflict (409).

    Raised when a write lost an optimistic-concurrency race or would
    collide with an existing unique value (e.g., a registered email).
    The caller should reload and retry.

    Examples
    --------
    >>> raise ConflictError(
    ...     message="MediaEntry was modified by another request",
    ...     details={"expected_version": 3, "current_version": 4}
    ... )
    """

    status_code: int = 409
    _error_code_value: str = "CONFLICT"


# Exit codes for CLI integration
EXIT_CODE_SUCCESS = 0
EXIT_CODE_GENERAL_ERROR = 1
EXIT_CODE_INVALID_ARGS = 2
