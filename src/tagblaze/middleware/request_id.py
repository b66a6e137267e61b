"""Request ID middleware — unique ID per request for tracing.

Learn: Every request gets an ID, either taken from the incoming
X-Request-ID header or generated here. It's bound to structlog's
contextvars so every `auth.*` / `ticket.*` / `db.*` event logged while
serving the request carries it, and it's echoed back in the response.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
