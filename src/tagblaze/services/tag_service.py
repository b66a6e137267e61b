"""Tag service — CRUD over tags.

Tag names are unique ignoring case ("Bug" and "bug" are the same tag),
while the stored spelling is kept for display. The pre-checks below give
a clean DuplicateName on the common path; the unique index on lower(name)
settles concurrent writers.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.db.models import Tag, TicketTag
from tagblaze.db.transaction import atomic, reading
from tagblaze.errors import DuplicateName, NotFound, ValidationError

logger = structlog.get_logger()


def clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Tag name must not be empty")
    return name


def _duplicate(name: str) -> DuplicateName:
    return DuplicateName(f"Tag '{name}' already exists")


class TagService:
    """Business logic for tag CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_tag(self, name: str) -> Tag:
        name = clean_name(name)
        async with reading(self.db):
            if await self._find_by_name(name):
                raise _duplicate(name)

        tag = Tag(name=name)
        async with atomic(self.db, on_conflict=lambda e: _duplicate(name)):
            self.db.add(tag)
            await self.db.flush()
            await self.db.refresh(tag)

        logger.info("tag.created", tag_id=tag.id, name=tag.name)
        return tag

    async def list_tags(self) -> list[Tag]:
        async with reading(self.db):
            result = await self.db.execute(select(Tag).order_by(Tag.id))
            return list(result.scalars().all())

    async def get_tag(self, tag_id: int) -> Tag:
        async with reading(self.db):
            tag = await self._get(tag_id)
        if tag is None:
            raise NotFound(f"Tag {tag_id} not found")
        return tag

    async def update_tag(self, tag_id: int, name: str) -> Tag:
        """Rename a tag. Re-casing a tag's own name is allowed."""
        name = clean_name(name)
        async with atomic(self.db, on_conflict=lambda e: _duplicate(name)):
            tag = await self._get(tag_id)
            if tag is None:
                raise NotFound(f"Tag {tag_id} not found")
            clash = await self._find_by_name(name)
            if clash is not None and clash.id != tag_id:
                raise _duplicate(name)
            tag.name = name
            await self.db.flush()
            await self.db.refresh(tag)

        logger.info("tag.updated", tag_id=tag_id, name=name)
        return tag

    async def delete_tag(self, tag_id: int) -> None:
        """Delete a tag and detach it from every ticket, atomically."""
        async with atomic(self.db):
            if await self._get(tag_id) is None:
                raise NotFound(f"Tag {tag_id} not found")
            relations = await self.db.execute(
                delete(TicketTag).where(TicketTag.tag_id == tag_id)
            )
            await self.db.execute(delete(Tag).where(Tag.id == tag_id))

        logger.info("tag.deleted", tag_id=tag_id, relations_removed=relations.rowcount)

    async def _get(self, tag_id: int) -> Optional[Tag]:
        result = await self.db.execute(select(Tag).where(Tag.id == tag_id))
        return result.scalars().first()

    async def _find_by_name(self, name: str) -> Optional[Tag]:
        result = await self.db.execute(
            select(Tag).where(func.lower(Tag.name) == name.lower())
        )
        return result.scalars().first()
