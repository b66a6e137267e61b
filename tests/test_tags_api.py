"""Tag CRUD tests — case-insensitive names, public reads, cascade on delete."""

import pytest


async def _tag(client, headers, name: str) -> dict:
    r = await client.post("/tags", json={"name": name}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_create_and_list_tags(client, agent_headers):
    bug = await _tag(client, agent_headers, "Bug")
    feature = await _tag(client, agent_headers, "Feature")
    assert bug["id"] == 1
    assert bug["name"] == "Bug"

    r = await client.get("/tags")
    assert r.status_code == 200
    assert [t["id"] for t in r.json()] == [bug["id"], feature["id"]]


@pytest.mark.asyncio
async def test_tag_reads_are_public(client, agent_headers):
    tag = await _tag(client, agent_headers, "Public")
    r = await client.get(f"/tags/{tag['id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "Public"


@pytest.mark.asyncio
async def test_tag_writes_require_token(client):
    r = await client.post("/tags", json={"name": "Nope"})
    assert r.status_code == 401
    r = await client.put("/tags/1", json={"name": "Nope"})
    assert r.status_code == 401
    r = await client.delete("/tags/1")
    assert r.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("dupe", ["Bug", "bug", "BUG", "  bug  "])
async def test_duplicate_tag_name_ignores_case(client, agent_headers, dupe):
    await _tag(client, agent_headers, "Bug")
    r = await client.post("/tags", json={"name": dupe}, headers=agent_headers)
    assert r.status_code == 409
    assert r.json()["error"] == "duplicate_name"

    r = await client.get("/tags")
    assert len(r.json()) == 1


@pytest.mark.asyncio
async def test_empty_tag_name(client, agent_headers):
    r = await client.post("/tags", json={"name": "   "}, headers=agent_headers)
    assert r.status_code == 422
    assert r.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_rename_tag(client, agent_headers):
    tag = await _tag(client, agent_headers, "Bgu")
    r = await client.put(f"/tags/{tag['id']}", json={"name": "Bug"}, headers=agent_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Bug"


@pytest.mark.asyncio
async def test_recase_own_name(client, agent_headers):
    """Changing only the case of a tag's own name is not a conflict."""
    tag = await _tag(client, agent_headers, "urgent")
    r = await client.put(f"/tags/{tag['id']}", json={"name": "Urgent"}, headers=agent_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Urgent"


@pytest.mark.asyncio
async def test_rename_onto_other_tag_conflicts(client, agent_headers):
    await _tag(client, agent_headers, "Bug")
    feature = await _tag(client, agent_headers, "Feature")
    r = await client.put(f"/tags/{feature['id']}", json={"name": "BUG"}, headers=agent_headers)
    assert r.status_code == 409

    r = await client.get(f"/tags/{feature['id']}")
    assert r.json()["name"] == "Feature"


@pytest.mark.asyncio
async def test_missing_tag(client, agent_headers):
    assert (await client.get("/tags/77")).status_code == 404
    r = await client.put("/tags/77", json={"name": "X"}, headers=agent_headers)
    assert r.status_code == 404
    r = await client.delete("/tags/77", headers=agent_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_tag(client, agent_headers):
    tag = await _tag(client, agent_headers, "Temp")
    r = await client.delete(f"/tags/{tag['id']}", headers=agent_headers)
    assert r.status_code == 204
    assert (await client.get(f"/tags/{tag['id']}")).status_code == 404

    # Name is free again
    await _tag(client, agent_headers, "temp")
