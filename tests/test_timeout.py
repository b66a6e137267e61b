"""Request timeout tests against the real app.

Learn: Commits are slowed down (flush first, then sleep, then commit) so
the write has already reached the database when the deadline passes.
A timed-out request must leave the store exactly as it was: the pending
INSERT/DELETE is rolled back, the 504 arrives at the deadline rather than
after the handler would have finished, and the next write goes through.
"""

import asyncio
import time

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

TIMEOUT = 0.5
SLOW = 3.0


@pytest.fixture()
def test_settings(test_settings):
    return test_settings.model_copy(update={"request_timeout_seconds": TIMEOUT})


@pytest.fixture()
def slow_commits(monkeypatch):
    real_commit = AsyncSession.commit

    async def slow_commit(self):
        await self.flush()
        await asyncio.sleep(SLOW)
        await real_commit(self)

    monkeypatch.setattr(AsyncSession, "commit", slow_commit)
    return monkeypatch


@pytest.mark.asyncio
async def test_timed_out_create_is_rolled_back(client, agent_headers, slow_commits):
    started = time.monotonic()
    r = await client.post("/tags", json={"name": "Bug"}, headers=agent_headers)
    elapsed = time.monotonic() - started

    assert r.status_code == 504
    assert r.json()["error"] == "timeout"
    assert elapsed < SLOW

    slow_commits.undo()
    r = await client.get("/tags")
    assert r.json() == []

    # The rolled-back transaction released its locks
    r = await client.post("/tags", json={"name": "Bug"}, headers=agent_headers)
    assert r.status_code == 201


@pytest.mark.asyncio
async def test_timed_out_cascade_delete_is_rolled_back(client, agent_headers, monkeypatch):
    r = await client.post("/tickets", json={"title": "Keep me"}, headers=agent_headers)
    ticket = r.json()
    r = await client.post("/tags", json={"name": "Urgent"}, headers=agent_headers)
    tag = r.json()
    await client.post(f"/relations/{ticket['id']}/tags/{tag['id']}", headers=agent_headers)

    real_commit = AsyncSession.commit

    async def slow_commit(self):
        await self.flush()
        await asyncio.sleep(SLOW)
        await real_commit(self)

    monkeypatch.setattr(AsyncSession, "commit", slow_commit)
    r = await client.delete(f"/tickets/{ticket['id']}", headers=agent_headers)
    assert r.status_code == 504
    monkeypatch.undo()

    r = await client.get(f"/tickets/{ticket['id']}", headers=agent_headers)
    assert r.status_code == 200
    r = await client.get(f"/relations/{ticket['id']}/tags")
    assert [t["name"] for t in r.json()] == ["Urgent"]
