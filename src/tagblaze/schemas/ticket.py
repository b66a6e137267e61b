"""Pydantic schemas for tickets.

- TicketCreate: what you POST to create a ticket
- TicketUpdate: what you PUT to modify a ticket (all optional, partial)
- TicketRead: what the API returns
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

STATUS_PATTERN = r"^(open|in_progress|closed)$"


class TicketCreate(BaseModel):
    title: str = Field(..., max_length=500)
    description: Optional[str] = None
    status: str = Field(default="open", pattern=STATUS_PATTERN)


class TicketUpdate(BaseModel):
    """Partial update — only fields present in the body are applied."""
    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)


class TicketRead(BaseModel):
    id: int
    title: str
    description: Optional[str]
    status: str
    created_by: Optional[int]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
