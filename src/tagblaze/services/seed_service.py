"""Dev reset/seed service — wipe the store and load demo data.

Learn: Development-only. Wired to POST /admin/dev/reset-db (mounted only
when TAGBLAZE_ENABLE_DEV_ROUTES is on) and the `tagblaze reset-db` CLI
command. Wipe and seed run in one transaction, so a failed seed leaves
the previous data untouched.

On PostgreSQL the tables are TRUNCATEd with RESTART IDENTITY so seeded
rows get ids 1..n again. Elsewhere (SQLite) plain DELETEs do the same,
since SQLite hands out max(id)+1 for an empty table.
"""

import structlog
from sqlalchemy import delete, text
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.auth.password import hash_password
from tagblaze.db.models import Tag, Ticket, TicketTag, User
from tagblaze.db.transaction import atomic

logger = structlog.get_logger()

DEV_PASSWORD = "devpass123"

SEED_USERS = [
    {"email": "zoya@tagblaze.dev", "name": "Zoya", "role": "agent"},
    {"email": "ankit@tagblaze.dev", "name": "Ankit", "role": "admin"},
    {"email": "divya@tagblaze.dev", "name": "Divya Singh", "role": "agent"},
]

SEED_TAGS = ["Bug", "Feature", "Urgent"]

# (title, description, index into SEED_USERS)
SEED_TICKETS = [
    ("Fix navbar overflow bug", "Navbar overlaps on mobile screens", 0),
    ("Add dark mode toggle", "Users should be able to switch themes", 1),
]

# (ticket index, tag index)
SEED_RELATIONS = [(0, 0), (0, 2), (1, 1)]


class SeedService:
    """Resets the database to a known demo state."""

    def __init__(self, db: AsyncSession, bcrypt_rounds: int = 12):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    async def reset(self) -> dict:
        hashed = hash_password(DEV_PASSWORD, rounds=self.bcrypt_rounds)

        async with atomic(self.db):
            await self._wipe()

            users = [User(password_hash=hashed, **u) for u in SEED_USERS]
            self.db.add_all(users)
            tags = [Tag(name=name) for name in SEED_TAGS]
            self.db.add_all(tags)
            await self.db.flush()

            tickets = [
                Ticket(title=title, description=desc, created_by=users[owner].id)
                for title, desc, owner in SEED_TICKETS
            ]
            self.db.add_all(tickets)
            await self.db.flush()

            relations = [
                TicketTag(ticket_id=tickets[t].id, tag_id=tags[g].id)
                for t, g in SEED_RELATIONS
            ]
            self.db.add_all(relations)

        summary = {
            "reset": True,
            "users_seeded": len(users),
            "tags_seeded": len(tags),
            "tickets_seeded": len(tickets),
            "relations_seeded": len(relations),
        }
        logger.info("dev.reset_db", **summary)
        return summary

    async def _wipe(self) -> None:
        if self.db.bind.dialect.name == "postgresql":
            await self.db.execute(
                text(
                    "TRUNCATE ticket_tags, tickets, tags, users "
                    "RESTART IDENTITY CASCADE"
                )
            )
            return
        for model in (TicketTag, Ticket, Tag, User):
            await self.db.execute(delete(model))
