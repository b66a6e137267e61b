"""Pydantic schemas for tags and ticket↔tag relations."""

from datetime import datetime

from pydantic import BaseModel, Field


class TagCreate(BaseModel):
    name: str = Field(..., max_length=100)


class TagUpdate(BaseModel):
    name: str = Field(..., max_length=100)


class TagRead(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AssignmentRead(BaseModel):
    ticket_id: int
    tag_id: int
    created: bool
