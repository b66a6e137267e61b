"""Relation service — owns the ticket↔tag join table.

Learn: Two deliberate choices keep client retries simple:

- assign is idempotent. Assigning a tag a ticket already has is a no-op
  success (created=False), not a conflict.
- remove of a missing pair is a no-op success. The post-condition
  ("this tag is not on this ticket") already holds.

Both parents must exist for assign; the existence checks and the INSERT
share one transaction. If a concurrent request slips in between:

- a duplicate INSERT trips the (ticket_id, tag_id) primary key → we
  re-check and report the pair as already present
- a parent deleted underneath us trips the foreign key → we re-check
  and report NotFound for whichever side vanished
"""

from dataclasses import dataclass

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.db.models import Tag, Ticket, TicketTag
from tagblaze.db.transaction import atomic, reading
from tagblaze.errors import NotFound, StorageFailure, TagBlazeError

logger = structlog.get_logger()


class _RelationConflict(TagBlazeError):
    """Internal: the INSERT lost a race. Resolved by _resolve_conflict()."""


@dataclass(frozen=True)
class Assignment:
    ticket_id: int
    tag_id: int
    created: bool


class RelationService:
    """Business logic for ticket↔tag associations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_tags_for_ticket(self, ticket_id: int) -> list[Tag]:
        """Tags on a ticket, ascending tag id. NotFound if the ticket is missing."""
        async with reading(self.db):
            await self._require_ticket(ticket_id)
            result = await self.db.execute(
                select(Tag)
                .join(TicketTag, TicketTag.tag_id == Tag.id)
                .where(TicketTag.ticket_id == ticket_id)
                .order_by(Tag.id)
            )
            return list(result.scalars().all())

    async def assign(self, ticket_id: int, tag_id: int) -> Assignment:
        try:
            async with atomic(
                self.db, on_conflict=lambda e: _RelationConflict(str(e.orig))
            ):
                await self._require_ticket(ticket_id)
                await self._require_tag(tag_id)
                if await self._pair_exists(ticket_id, tag_id):
                    return Assignment(ticket_id, tag_id, created=False)
                self.db.add(TicketTag(ticket_id=ticket_id, tag_id=tag_id))
        except _RelationConflict:
            return await self._resolve_conflict(ticket_id, tag_id)

        logger.info("relation.assigned", ticket_id=ticket_id, tag_id=tag_id)
        return Assignment(ticket_id, tag_id, created=True)

    async def remove(self, ticket_id: int, tag_id: int) -> bool:
        """Detach a tag. Returns whether a row was actually removed."""
        async with atomic(self.db):
            result = await self.db.execute(
                delete(TicketTag).where(
                    TicketTag.ticket_id == ticket_id,
                    TicketTag.tag_id == tag_id,
                )
            )
        removed = result.rowcount > 0
        if removed:
            logger.info("relation.removed", ticket_id=ticket_id, tag_id=tag_id)
        return removed

    async def _resolve_conflict(self, ticket_id: int, tag_id: int) -> Assignment:
        async with reading(self.db):
            if await self._pair_exists(ticket_id, tag_id):
                return Assignment(ticket_id, tag_id, created=False)
            await self._require_ticket(ticket_id)
            await self._require_tag(tag_id)
        # Neither a duplicate nor a vanished parent
        raise StorageFailure()

    async def _require_ticket(self, ticket_id: int) -> None:
        result = await self.db.execute(select(Ticket.id).where(Ticket.id == ticket_id))
        if result.scalar_one_or_none() is None:
            raise NotFound(f"Ticket {ticket_id} not found")

    async def _require_tag(self, tag_id: int) -> None:
        result = await self.db.execute(select(Tag.id).where(Tag.id == tag_id))
        if result.scalar_one_or_none() is None:
            raise NotFound(f"Tag {tag_id} not found")

    async def _pair_exists(self, ticket_id: int, tag_id: int) -> bool:
        result = await self.db.execute(
            select(TicketTag.ticket_id).where(
                TicketTag.ticket_id == ticket_id,
                TicketTag.tag_id == tag_id,
            )
        )
        return result.first() is not None
