#!/usr/bin/env python3
"""
TagBlaze Roles Example — what agents and admins can and can't do.

Registers one agent and one admin, then shows:
- both can create and tag tickets
- only the admin can list users (agent gets 403 forbidden)
- a missing or tampered token gets 401 with WWW-Authenticate: Bearer

Run with: python examples/roles_and_tokens.py

Requires: pip install httpx
Server must be running: http://localhost:8000
"""

import httpx

from _common import BASE, create_client


def main():
    agent = create_client("agent")
    admin = create_client("admin")

    # ── Both roles can work tickets ───────────────────────────────
    print("\n1. Agent and admin each open a ticket...")
    for who, client in (("agent", agent), ("admin", admin)):
        resp = client.post("/tickets", json={"title": f"Opened by the {who}"})
        assert resp.status_code == 201, f"Failed: {resp.text}"
        print(f"   {who:5s} → ticket #{resp.json()['id']}")

    # ── Admin-only route ──────────────────────────────────────────
    print("\n2. Listing users...")
    resp = admin.get("/auth/users")
    print(f"   admin → {resp.status_code}, {len(resp.json())} user(s)")
    resp = agent.get("/auth/users")
    print(f"   agent → {resp.status_code} {resp.json()['error']}")

    # ── Bad credentials ───────────────────────────────────────────
    print("\n3. Calling without a valid token...")
    anon = httpx.Client(base_url=BASE, timeout=10)
    resp = anon.post("/tickets", json={"title": "nope"})
    print(f"   no token  → {resp.status_code} {resp.json()['error']}"
          f" (WWW-Authenticate: {resp.headers.get('www-authenticate')})")

    token = agent.headers["Authorization"].removeprefix("Bearer ")
    tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")
    resp = anon.get("/auth/me", headers={"Authorization": f"Bearer {tampered}"})
    print(f"   tampered  → {resp.status_code} {resp.json()['error']}")

    resp = anon.post("/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})
    print(f"   bad login → {resp.status_code} {resp.json()['error']}")

    print("\n✓ Roles example complete")


if __name__ == "__main__":
    main()
