"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is declared per route (or per route group inside a router)
because the surface is mixed: tag and relation reads are public while
writes need a bearer token. Health and auth entry points are open.
"""

from fastapi import APIRouter

from tagblaze.api.admin import router as admin_router
from tagblaze.api.auth import router as auth_router
from tagblaze.api.health import router as health_router
from tagblaze.api.relations import router as relations_router
from tagblaze.api.tags import router as tags_router
from tagblaze.api.tickets import router as tickets_router


def build_api_router(enable_dev_routes: bool = False) -> APIRouter:
    api_router = APIRouter()

    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(auth_router, tags=["auth"])
    api_router.include_router(tickets_router, tags=["tickets"])
    api_router.include_router(tags_router, tags=["tags"])
    api_router.include_router(relations_router, tags=["relations"])

    # Dev-only: wipe + seed
    if enable_dev_routes:
        api_router.include_router(admin_router, tags=["dev"])

    return api_router
