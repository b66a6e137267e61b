"""Auth API tests — registration, login, the bearer guard, roles.

Learn: Tests cover:
1. User registration + duplicate prevention (case-insensitive email)
2. Login → JWT access token, same error for unknown email and bad password
3. Protected /auth/me endpoint and its 401 variants
4. Admin-only /auth/users
"""

import uuid

import pytest

TEST_PASSWORD = "pw-123456"


def _email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    """Register a new user account; role defaults to agent."""
    email = _email()
    r = await client.post(
        "/auth/register",
        json={"email": email, "name": "Test User", "password": "secure_password_123"},
    )
    assert r.status_code == 201
    user = r.json()
    assert user["email"] == email
    assert user["name"] == "Test User"
    assert user["role"] == "agent"
    assert isinstance(user["id"], int)
    assert "password" not in user
    assert "password_hash" not in user


@pytest.mark.asyncio
async def test_register_admin(client):
    r = await client.post(
        "/auth/register",
        json={"email": _email("boss"), "name": "Boss", "password": TEST_PASSWORD, "role": "admin"},
    )
    assert r.status_code == 201
    assert r.json()["role"] == "admin"


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    """Can't register with the same email twice."""
    body = {"email": _email("dup"), "name": "User 1", "password": "password_123"}

    r1 = await client.post("/auth/register", json=body)
    assert r1.status_code == 201

    r2 = await client.post("/auth/register", json=body)
    assert r2.status_code == 409
    assert r2.json()["error"] == "duplicate_email"


@pytest.mark.asyncio
async def test_register_duplicate_email_different_case(client):
    """Emails are compared case-insensitively and stored lower-cased."""
    r1 = await client.post(
        "/auth/register",
        json={"email": "Dana@Example.com", "name": "Dana", "password": TEST_PASSWORD},
    )
    assert r1.status_code == 201
    assert r1.json()["email"] == "dana@example.com"

    r2 = await client.post(
        "/auth/register",
        json={"email": "dana@EXAMPLE.COM", "name": "Dana 2", "password": TEST_PASSWORD},
    )
    assert r2.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, fragment",
    [
        ({"email": "not-an-email", "name": "X", "password": TEST_PASSWORD}, "email"),
        ({"email": "a@x.com", "name": "   ", "password": TEST_PASSWORD}, "Name"),
        ({"email": "a@x.com", "name": "X", "password": "abc"}, "at least 8"),
        ({"email": "a@x.com", "name": "X", "password": TEST_PASSWORD, "role": "root"}, "role"),
    ],
)
async def test_register_validation(client, body, fragment):
    r = await client.post("/auth/register", json=body)
    assert r.status_code == 422
    data = r.json()
    assert data["error"] == "validation_error"
    assert fragment in data["detail"]


@pytest.mark.asyncio
async def test_register_missing_field_is_422(client):
    r = await client.post("/auth/register", json={"email": "a@x.com"})
    assert r.status_code == 422
    assert set(r.json()) == {"error", "detail"}
    assert r.json()["error"] == "validation_error"
    assert "password" in r.json()["detail"]


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client):
    """Login with valid credentials returns a bearer token."""
    email = _email("login")
    await client.post(
        "/auth/register",
        json={"email": email, "name": "Login User", "password": "my_password_123"},
    )

    r = await client.post("/auth/login", json={"email": email, "password": "my_password_123"})
    assert r.status_code == 200
    tokens = r.json()
    assert tokens["access_token"].count(".") == 2
    assert tokens["token_type"] == "bearer"
    assert tokens["expires_in"] == 24 * 60 * 60


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client):
    await client.post(
        "/auth/register",
        json={"email": "casey@example.com", "name": "Casey", "password": TEST_PASSWORD},
    )
    r = await client.post("/auth/login", json={"email": "CASEY@example.com", "password": TEST_PASSWORD})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client):
    """Wrong password and unknown email give the exact same response body."""
    email = _email("wrong")
    await client.post(
        "/auth/register",
        json={"email": email, "name": "User", "password": "correct_password"},
    )

    wrong_pw = await client.post("/auth/login", json={"email": email, "password": "wrong_password"})
    no_user = await client.post(
        "/auth/login", json={"email": "nobody@example.com", "password": "wrong_password"}
    )
    assert wrong_pw.status_code == no_user.status_code == 401
    assert wrong_pw.json() == no_user.json()
    assert wrong_pw.json()["error"] == "invalid_credentials"


# ═══════════════════════════════════════════════════════════
# /auth/me and the guard
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client, login_as):
    email = _email("me")
    headers = await login_as("agent", email=email)

    r = await client.get("/auth/me", headers=headers)
    assert r.status_code == 200
    me = r.json()
    assert me["email"] == email
    assert me["role"] == "agent"
    assert isinstance(me["user_id"], int)


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["error"] == "unauthorized"
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize("header", ["Token abc", "Bearer", "Basic dXNlcjpwYXNz"])
async def test_me_with_wrong_scheme(client, header):
    r = await client.get("/auth/me", headers={"Authorization": header})
    assert r.status_code == 401
    assert r.json()["error"] == "unauthorized"


@pytest.mark.asyncio
async def test_me_with_garbage_token(client):
    r = await client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    assert r.json()["error"] == "token_invalid"
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_with_tampered_token(client, agent_headers):
    token = agent_headers["Authorization"].split(" ", 1)[1]
    header, payload, sig = token.split(".")
    forged = f"{header}.{payload}.{sig[::-1]}"
    r = await client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401
    assert r.json()["error"] == "token_invalid"


@pytest.mark.asyncio
async def test_token_for_deleted_user_is_invalid(client, signer):
    """A well-signed token whose subject doesn't exist is rejected."""
    token = signer.issue(4242, "agent")
    r = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["error"] == "token_invalid"


# ═══════════════════════════════════════════════════════════
# Roles
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_users_as_admin(client, admin_headers, login_as):
    await login_as("agent")
    r = await client.get("/auth/users", headers=admin_headers)
    assert r.status_code == 200
    users = r.json()
    assert [u["role"] for u in users] == ["admin", "agent"]
    assert all("password_hash" not in u for u in users)


@pytest.mark.asyncio
async def test_list_users_as_agent_forbidden(client, agent_headers):
    r = await client.get("/auth/users", headers=agent_headers)
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden"
    assert "WWW-Authenticate" not in r.headers


@pytest.mark.asyncio
async def test_admin_passes_agent_routes(client, admin_headers):
    """admin ⊇ agent: admins can use every agent route."""
    r = await client.post("/tickets", json={"title": "From an admin"}, headers=admin_headers)
    assert r.status_code == 201
