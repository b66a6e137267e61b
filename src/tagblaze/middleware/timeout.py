"""Request timeout middleware.

Learn: A plain ASGI middleware, not BaseHTTPMiddleware. The whole
downstream app (inner middleware, dependencies, the route handler) runs
under asyncio.wait_for, so when the deadline passes the handler itself
is cancelled at whatever it is awaiting. The CancelledError unwinds
through atomic(), which rolls the open transaction back, so a timed-out
write never lands.

If the handler hasn't started its response yet the client gets a 504 in
the usual {"error", "detail"} shape. Once response bytes have gone out
there is nothing sensible to send, so the error propagates and the
server drops the connection.
"""

import asyncio

import structlog
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = structlog.get_logger()


class TimeoutMiddleware:
    """Cancel requests that take longer than `timeout_seconds`."""

    def __init__(self, app: ASGIApp, timeout_seconds: float = 30.0):
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.timeout_seconds:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_tracking),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "request.timeout",
                path=scope.get("path"),
                timeout_seconds=self.timeout_seconds,
                response_started=response_started,
            )
            if response_started:
                raise
            response = JSONResponse(
                status_code=504,
                content={
                    "error": "timeout",
                    "detail": f"Request exceeded {self.timeout_seconds:g}s",
                },
            )
            await response(scope, receive, send)
