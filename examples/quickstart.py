#!/usr/bin/env python3
"""
TagBlaze Quickstart — the full ticket/tag lifecycle in one script.

Registers an agent → creates a ticket and two tags → tags the ticket →
re-tags it (idempotent) → untags → deletes the ticket (relations cascade).
Run with: python examples/quickstart.py

Requires: pip install httpx
Server must be running: http://localhost:8000
"""

import uuid

from _common import create_client


def main():
    run_id = uuid.uuid4().hex[:6]
    client = create_client()

    # ── Who am I ──────────────────────────────────────────────────
    me = client.get("/auth/me").json()
    print(f"\nSigned in as {me['email']} (user #{me['user_id']}, {me['role']})")

    # ── Create ticket ─────────────────────────────────────────────
    print("\n1. Creating ticket...")
    resp = client.post("/tickets", json={
        "title": "Checkout button unresponsive on Safari",
        "description": "Clicking 'Pay' does nothing on Safari 17",
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    ticket = resp.json()
    print(f"   Ticket #{ticket['id']}: {ticket['title']} [{ticket['status']}]")

    # ── Create tags ───────────────────────────────────────────────
    print("\n2. Creating tags...")
    tags = []
    for name in (f"Bug-{run_id}", f"Safari-{run_id}"):
        resp = client.post("/tags", json={"name": name})
        assert resp.status_code == 201, f"Failed: {resp.text}"
        tags.append(resp.json())
        print(f"   Tag #{tags[-1]['id']}: {tags[-1]['name']}")

    # Same name, different case → conflict
    resp = client.post("/tags", json={"name": tags[0]["name"].upper()})
    print(f"   Re-creating '{tags[0]['name'].upper()}' → {resp.status_code} {resp.json()['error']}")

    # ── Tag the ticket ────────────────────────────────────────────
    print("\n3. Tagging the ticket...")
    for tag in tags:
        resp = client.post(f"/relations/{ticket['id']}/tags/{tag['id']}")
        assert resp.status_code == 201, f"Failed: {resp.text}"
    resp = client.post(f"/relations/{ticket['id']}/tags/{tags[0]['id']}")
    print(f"   Assigning {tags[0]['name']} again → {resp.status_code} created={resp.json()['created']}")

    on_ticket = client.get(f"/relations/{ticket['id']}/tags").json()
    print(f"   Tags on ticket: {', '.join(t['name'] for t in on_ticket)}")

    # ── Untag ─────────────────────────────────────────────────────
    print("\n4. Removing a tag...")
    resp = client.delete(f"/relations/{ticket['id']}/tags/{tags[1]['id']}")
    assert resp.status_code == 204, f"Failed: {resp.text}"
    on_ticket = client.get(f"/relations/{ticket['id']}/tags").json()
    print(f"   Tags on ticket: {', '.join(t['name'] for t in on_ticket)}")

    # ── Move through statuses ─────────────────────────────────────
    print("\n5. Working the ticket...")
    for status in ("in_progress", "closed"):
        resp = client.put(f"/tickets/{ticket['id']}", json={"status": status})
        assert resp.status_code == 200, f"Failed: {resp.text}"
        print(f"   → {resp.json()['status']}")

    # ── Delete (cascades relations) ───────────────────────────────
    print("\n6. Deleting the ticket...")
    resp = client.delete(f"/tickets/{ticket['id']}")
    assert resp.status_code == 204, f"Failed: {resp.text}"
    resp = client.get(f"/relations/{ticket['id']}/tags")
    print(f"   Tag list for deleted ticket → {resp.status_code} {resp.json()['error']}")

    # Tags themselves survive
    for tag in tags:
        assert client.get(f"/tags/{tag['id']}").status_code == 200

    print("\n✓ Quickstart complete")


if __name__ == "__main__":
    main()
