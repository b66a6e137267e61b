"""Ticket service — CRUD over tickets with cascading delete.

Learn: Status is validated against TicketStatus but transitions are
unrestricted — open → closed → open is fine. There is no state machine.

Delete is the interesting one. Relation rows referencing the ticket are
removed first, then the ticket itself, inside one transaction. The
ticket_tags foreign key is also ON DELETE CASCADE, but the explicit step
means the behavior doesn't depend on the store honoring it.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.db.models import Ticket, TicketStatus, TicketTag
from tagblaze.db.transaction import atomic, reading
from tagblaze.errors import NotFound, ValidationError

logger = structlog.get_logger()

_UNSET = object()


def parse_status(value: str) -> TicketStatus:
    try:
        return TicketStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TicketStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}")


def clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title must not be empty")
    return title


class TicketService:
    """Business logic for ticket CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_ticket(
        self,
        title: str,
        description: Optional[str] = None,
        status: str = TicketStatus.OPEN.value,
        created_by: Optional[int] = None,
    ) -> Ticket:
        ticket = Ticket(
            title=clean_title(title),
            description=description,
            status=parse_status(status).value,
            created_by=created_by,
        )
        async with atomic(self.db):
            self.db.add(ticket)
            await self.db.flush()
            await self.db.refresh(ticket)

        logger.info("ticket.created", ticket_id=ticket.id, created_by=created_by)
        return ticket

    # ─── Read ────────────────────────────────────────────

    async def list_tickets(self) -> list[Ticket]:
        """All tickets, ascending id. Fresh query on every call."""
        async with reading(self.db):
            result = await self.db.execute(select(Ticket).order_by(Ticket.id))
            return list(result.scalars().all())

    async def get_ticket(self, ticket_id: int) -> Ticket:
        async with reading(self.db):
            result = await self.db.execute(
                select(Ticket).where(Ticket.id == ticket_id)
            )
            ticket = result.scalars().first()
        if ticket is None:
            raise NotFound(f"Ticket {ticket_id} not found")
        return ticket

    # ─── Update ──────────────────────────────────────────

    async def update_ticket(
        self,
        ticket_id: int,
        title: Optional[str] = None,
        description=_UNSET,
        status: Optional[str] = None,
    ) -> Ticket:
        """Apply a partial update. Omitted fields are left alone.

        description may be set to None explicitly to clear it.
        """
        # Validate before touching the store
        new_title = clean_title(title) if title is not None else None
        new_status = parse_status(status).value if status is not None else None

        async with atomic(self.db):
            result = await self.db.execute(
                select(Ticket).where(Ticket.id == ticket_id)
            )
            ticket = result.scalars().first()
            if ticket is None:
                raise NotFound(f"Ticket {ticket_id} not found")

            changes = {}
            if new_title is not None:
                ticket.title = new_title
                changes["title"] = new_title
            if description is not _UNSET:
                ticket.description = description
                changes["description"] = description
            if new_status is not None:
                changes["status"] = {"from": ticket.status, "to": new_status}
                ticket.status = new_status
            await self.db.flush()
            await self.db.refresh(ticket)

        if changes:
            logger.info("ticket.updated", ticket_id=ticket_id, fields=sorted(changes))
        return ticket

    # ─── Delete (cascades relations) ─────────────────────

    async def delete_ticket(self, ticket_id: int) -> None:
        async with atomic(self.db):
            result = await self.db.execute(
                select(Ticket.id).where(Ticket.id == ticket_id)
            )
            if result.scalar_one_or_none() is None:
                raise NotFound(f"Ticket {ticket_id} not found")

            relations = await self.db.execute(
                delete(TicketTag).where(TicketTag.ticket_id == ticket_id)
            )
            await self.db.execute(delete(Ticket).where(Ticket.id == ticket_id))

        logger.info(
            "ticket.deleted",
            ticket_id=ticket_id,
            relations_removed=relations.rowcount,
        )
