"""
Shared helpers for TagBlaze examples.

Handles the health check and authentication (register + login) so each
example can focus on its specific workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000"


def check_backend() -> None:
    """Verify the server is reachable and its database is up."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Server not reachable at {BASE}")
        print("Start it with:  uvicorn tagblaze.main:app --reload --port 8000")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print(f"Server health: {health['status']} (v{health['version']})")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    if health["database"] != "ok":
        print("\nERROR: Database is not reachable. Check TAGBLAZE_DATABASE_URL.")
        sys.exit(1)


def authenticate(role: str = "agent") -> str:
    """Register a fresh user and login, returning an access token.

    Uses a unique email per run so examples can be re-run.
    """
    run_id = uuid.uuid4().hex[:8]
    email = f"demo-{run_id}@example.com"
    password = "demo-password-123"

    resp = httpx.post(
        f"{BASE}/auth/register",
        json={
            "email": email,
            "name": f"Demo {role.title()} {run_id}",
            "password": password,
            "role": role,
        },
        timeout=10,
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    resp = httpx.post(
        f"{BASE}/auth/login",
        json={"email": email, "password": password},
        timeout=10,
    )
    if resp.status_code != 200:
        print(f"ERROR: Login failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    return resp.json()["access_token"]


def create_client(role: str = "agent") -> httpx.Client:
    """Check the server, authenticate, and return a Client with auth headers."""
    check_backend()
    token = authenticate(role)
    print(f"  Auth:     ✓ (JWT, {role})")
    return httpx.Client(
        base_url=BASE,
        timeout=10,
        headers={"Authorization": f"Bearer {token}"},
    )
