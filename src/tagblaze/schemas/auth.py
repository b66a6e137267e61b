"""Pydantic schemas for registration, login and user info.

Learn: Shape only. Email format and password policy are enforced by the
Authenticator so every caller (HTTP, CLI, seed) gets the same rules and
the same ValidationError body.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str
    name: str
    password: str
    role: str = Field(default="agent", description="agent or admin")


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}


class MeRead(BaseModel):
    user_id: int
    role: str
    email: str
    name: str
