"""Tag API routes.

Reads are public; create/update/delete need a bearer token.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.auth.dependencies import get_current_user
from tagblaze.db.engine import get_db
from tagblaze.schemas.tag import TagCreate, TagRead, TagUpdate
from tagblaze.services.tag_service import TagService

router = APIRouter(prefix="/tags")

_auth = [Depends(get_current_user)]


def _svc(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(db)


@router.post("", response_model=TagRead, status_code=201, dependencies=_auth)
async def create_tag(body: TagCreate, svc: TagService = Depends(_svc)):
    return await svc.create_tag(body.name)


@router.get("", response_model=list[TagRead])
async def list_tags(svc: TagService = Depends(_svc)):
    return await svc.list_tags()


@router.get("/{tag_id}", response_model=TagRead)
async def get_tag(tag_id: int, svc: TagService = Depends(_svc)):
    return await svc.get_tag(tag_id)


@router.put("/{tag_id}", response_model=TagRead, dependencies=_auth)
async def update_tag(tag_id: int, body: TagUpdate, svc: TagService = Depends(_svc)):
    return await svc.update_tag(tag_id, body.name)


@router.delete("/{tag_id}", status_code=204, dependencies=_auth)
async def delete_tag(tag_id: int, svc: TagService = Depends(_svc)):
    """Delete a tag and detach it from every ticket."""
    await svc.delete_tag(tag_id)
    return Response(status_code=204)
