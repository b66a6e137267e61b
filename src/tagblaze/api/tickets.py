"""Ticket API routes.

Learn: Routes translate HTTP to service calls. Every route here sits
behind the authorization guard (any authenticated user); errors raised
by the service (NotFound, ValidationError, StorageFailure) propagate to
the app-wide exception handler.

PUT is a partial update: only fields present in the body are applied,
so `{"description": null}` clears the description while `{}` is a no-op.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.auth.dependencies import CurrentIdentity, get_current_user
from tagblaze.db.engine import get_db
from tagblaze.schemas.ticket import TicketCreate, TicketRead, TicketUpdate
from tagblaze.services.ticket_service import TicketService

router = APIRouter(prefix="/tickets")


def _svc(db: AsyncSession = Depends(get_db)) -> TicketService:
    return TicketService(db)


@router.post("", response_model=TicketRead, status_code=201)
async def create_ticket(
    body: TicketCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TicketService = Depends(_svc),
):
    """Create a ticket owned by the caller (status defaults to 'open')."""
    return await svc.create_ticket(
        title=body.title,
        description=body.description,
        status=body.status,
        created_by=identity.user_id,
    )


@router.get("", response_model=list[TicketRead])
async def list_tickets(
    _: CurrentIdentity = Depends(get_current_user),
    svc: TicketService = Depends(_svc),
):
    """All tickets in ascending id order."""
    return await svc.list_tickets()


@router.get("/{ticket_id}", response_model=TicketRead)
async def get_ticket(
    ticket_id: int,
    _: CurrentIdentity = Depends(get_current_user),
    svc: TicketService = Depends(_svc),
):
    return await svc.get_ticket(ticket_id)


@router.put("/{ticket_id}", response_model=TicketRead)
async def update_ticket(
    ticket_id: int,
    body: TicketUpdate,
    _: CurrentIdentity = Depends(get_current_user),
    svc: TicketService = Depends(_svc),
):
    """Partially update a ticket (title, description, status)."""
    return await svc.update_ticket(ticket_id, **body.model_dump(exclude_unset=True))


@router.delete("/{ticket_id}", status_code=204)
async def delete_ticket(
    ticket_id: int,
    _: CurrentIdentity = Depends(get_current_user),
    svc: TicketService = Depends(_svc),
):
    """Delete a ticket and all of its tag associations."""
    await svc.delete_ticket(ticket_id)
    return Response(status_code=204)
