"""Auth API — registration, login, current identity.

- POST /auth/register → create a new user account
- POST /auth/login → email/password → JWT access token
- GET /auth/me → current identity + profile
- GET /auth/users → all users (admin only)
"""

from fastapi import APIRouter, Depends

from tagblaze.auth.dependencies import (
    CurrentIdentity,
    get_authenticator,
    get_current_admin,
    get_current_user,
)
from tagblaze.auth.service import Authenticator
from tagblaze.errors import UserNotFound
from tagblaze.schemas.auth import (
    LoginRequest,
    MeRead,
    RegisterRequest,
    TokenResponse,
    UserRead,
)

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=UserRead, status_code=201)
async def register(
    body: RegisterRequest,
    auth: Authenticator = Depends(get_authenticator),
):
    """Create a new user account."""
    return await auth.register(
        email=body.email,
        name=body.name,
        password=body.password,
        role=body.role,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    auth: Authenticator = Depends(get_authenticator),
):
    """Login with email and password → JWT access token."""
    result = await auth.login(body.email, body.password)
    return TokenResponse(
        access_token=result.access_token,
        expires_in=result.expires_in,
    )


@router.get("/me", response_model=MeRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    auth: Authenticator = Depends(get_authenticator),
):
    """Get the current authenticated user's info."""
    user = await auth.get_user(identity.user_id)
    if user is None:
        raise UserNotFound("Invalid token: user no longer exists")
    return MeRead(
        user_id=user.id,
        role=identity.role.value,
        email=user.email,
        name=user.name,
    )


@router.get(
    "/users",
    response_model=list[UserRead],
    dependencies=[Depends(get_current_admin)],
)
async def list_users(auth: Authenticator = Depends(get_authenticator)):
    """List all registered users. Admins only."""
    return await auth.list_users()
