"""Request ID middleware for request correlation.

Every request gets an id, taken from the incoming ``X-Request-ID`` header
when it is usable or generated otherwise. The id is kept in a context
variable so log records and problem responses can carry it without the
request object being passed around, and it is echoed back on the
response.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger(__name__)

MAX_REQUEST_ID_LENGTH = 128
REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=""
)


def get_request_id() -> str:
    """Current request id, or an empty string outside a request."""
    return request_id_var.get()


def _sanitize_request_id(header_value: str | None) -> str:
    """Accept a client-supplied id only if it is printable ASCII.

    Missing or unusable values are replaced with a fresh UUID4; overlong
    values keep their first 128 characters.
    """
    if not header_value:
        return str(uuid.uuid4())

    if not all(33 <= ord(c) <= 126 for c in header_value):
        logger.warning("Ignoring X-Request-ID with non-printable characters")
        return str(uuid.uuid4())

    return header_value[:MAX_REQUEST_ID_LENGTH]


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Binds a request id to the context for the life of each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _sanitize_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(request_id)
        try:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


class RequestIdFilter(logging.Filter):
    """Logging filter that exposes ``%(request_id)s`` to formatters."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True
