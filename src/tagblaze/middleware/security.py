"""Security headers middleware.

Learn: TagBlaze only serves JSON, so the headers are the API subset:
- X-Content-Type-Options: no MIME sniffing of JSON bodies
- X-Frame-Options: responses are never framed
- Cache-Control: tokens and ticket data must not land in shared caches
- Strict-Transport-Security: only sent when the request came over HTTPS
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers.setdefault("Cache-Control", "no-store")
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
