"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything a request needs (engine, session factory, token
signer, settings) is built here and hung on app.state, so tests can build
an isolated app from their own Settings without touching module globals.

Lifespan only logs and disposes the engine; it does not build anything,
because test transports don't always run it.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tagblaze import __version__
from tagblaze.api import build_api_router
from tagblaze.auth.jwt import TokenSigner
from tagblaze.config import Settings, settings as default_settings
from tagblaze.db.engine import build_engine, build_session_factory
from tagblaze.errors import AUTH_CHALLENGE_ERRORS, TagBlazeError, ValidationError
from tagblaze.logging_config import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    logger.info(
        "tagblaze.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        dev_routes=settings.enable_dev_routes,
    )

    yield

    logger.info("tagblaze.shutdown")
    await app.state.engine.dispose()


async def handle_domain_error(request: Request, exc: TagBlazeError) -> JSONResponse:
    """Render any TagBlazeError as {"error": code, "detail": message}."""
    if exc.status_code >= 500:
        logger.error("request.failed", error=exc.error_code, detail=exc.message)
    else:
        logger.warning("request.rejected", error=exc.error_code, detail=exc.message)

    headers = None
    if isinstance(exc, AUTH_CHALLENGE_ERRORS):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "detail": exc.message},
        headers=headers,
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render pydantic request-shape errors like any other ValidationError.

    Learn: FastAPI's default body is {"detail": [...]}; clients of this API
    always get {"error": "validation_error", "detail": "<field>: <problem>"}
    whether the check failed in a schema or in a service.
    """
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"] if part != "body")
        problems.append(f"{field or 'body'}: {err['msg']}")
    return await handle_domain_error(request, ValidationError("; ".join(problems)))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="TagBlaze",
        description="Support tickets, tags, and the links between them",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    engine = build_engine(settings.database_url, echo=settings.debug)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_signer = TokenSigner.from_settings(settings)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Timeout → Security → RequestId → handler

    from tagblaze.middleware.request_id import RequestIdMiddleware
    from tagblaze.middleware.security import SecurityHeadersMiddleware
    from tagblaze.middleware.timeout import TimeoutMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TagBlazeError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    app.include_router(build_api_router(enable_dev_routes=settings.enable_dev_routes))

    return app


# Default app instance (used by uvicorn: tagblaze.main:app)
app = create_app()
