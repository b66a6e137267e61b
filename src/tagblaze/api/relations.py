"""Ticket↔tag relation routes.

- GET /relations/{ticket_id}/tags → tags on a ticket (public)
- POST /relations/{ticket_id}/tags/{tag_id} → attach (201 new, 200 already attached)
- DELETE /relations/{ticket_id}/tags/{tag_id} → detach (204, even if it wasn't attached)
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.auth.dependencies import get_current_user
from tagblaze.db.engine import get_db
from tagblaze.schemas.tag import AssignmentRead, TagRead
from tagblaze.services.relation_service import RelationService

router = APIRouter(prefix="/relations")

_auth = [Depends(get_current_user)]


def _svc(db: AsyncSession = Depends(get_db)) -> RelationService:
    return RelationService(db)


@router.get("/{ticket_id}/tags", response_model=list[TagRead])
async def list_tags_for_ticket(ticket_id: int, svc: RelationService = Depends(_svc)):
    return await svc.list_tags_for_ticket(ticket_id)


@router.post(
    "/{ticket_id}/tags/{tag_id}",
    response_model=AssignmentRead,
    status_code=201,
    dependencies=_auth,
)
async def assign_tag(
    ticket_id: int,
    tag_id: int,
    response: Response,
    svc: RelationService = Depends(_svc),
):
    """Attach a tag to a ticket. Idempotent."""
    assignment = await svc.assign(ticket_id, tag_id)
    if not assignment.created:
        response.status_code = 200
    return AssignmentRead(
        ticket_id=assignment.ticket_id,
        tag_id=assignment.tag_id,
        created=assignment.created,
    )


@router.delete("/{ticket_id}/tags/{tag_id}", status_code=204, dependencies=_auth)
async def remove_tag(ticket_id: int, tag_id: int, svc: RelationService = Depends(_svc)):
    """Detach a tag from a ticket. No-op if it wasn't attached."""
    await svc.remove(ticket_id, tag_id)
    return Response(status_code=204)
