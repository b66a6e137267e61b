"""Development-only admin routes.

Mounted by api/__init__.py only when settings.enable_dev_routes is on.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.db.engine import get_db
from tagblaze.services.seed_service import SeedService

router = APIRouter(prefix="/admin/dev")


@router.post("/reset-db")
async def reset_db(request: Request, db: AsyncSession = Depends(get_db)):
    """Wipe every table and load the demo users, tags, tickets and relations."""
    svc = SeedService(db, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)
    return await svc.reset()
