"""TagBlaze CLI — talk to a running TagBlaze server from the terminal.

Usage:
    tagblaze health                               # Server + database status
    tagblaze register a@x.com "Ana" pw123456      # Create an account
    tagblaze login a@x.com pw123456               # Print a bearer token
    export TAGBLAZE_TOKEN=$(tagblaze login a@x.com pw123456 --quiet)
    tagblaze me                                   # Who am I?
    tagblaze tickets                              # List tickets
    tagblaze ticket-create "Navbar overflows"     # Open a ticket
    tagblaze tags                                 # List tags
    tagblaze tag-create Bug                       # Create a tag
    tagblaze assign 1 1                           # Put tag 1 on ticket 1
    tagblaze unassign 1 1                         # Take it off again
    tagblaze ticket-tags 1                        # Tags on ticket 1
    tagblaze reset-db                             # Dev only: wipe + seed demo data
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from tagblaze import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("TAGBLAZE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the TagBlaze server."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0, headers=headers)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _check(r: httpx.Response) -> httpx.Response:
    """Exit 1 with the server's {"error", "detail"} if the call failed."""
    if r.is_success:
        return r
    try:
        body = r.json()
    except ValueError:
        body = {}
    if isinstance(body, dict) and "error" in body:
        msg = f"{body['error']}: {body.get('detail', '')}"
    else:
        msg = f"HTTP {r.status_code}: {r.text[:200]}"
    click.secho(f"Error: {msg}", fg="red", err=True)
    sys.exit(1)


def _status_color(status: str) -> str:
    colors = {
        "open": "yellow",
        "in_progress": "cyan",
        "closed": "green",
    }
    return colors.get(status, "white")


token_option = click.option(
    "--token",
    envvar="TAGBLAZE_TOKEN",
    help="Bearer token (or set TAGBLAZE_TOKEN)",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="tagblaze")
def main():
    """TagBlaze — support tickets and tags from the command line."""


# ---------------------------------------------------------------------------
# Health + auth
# ---------------------------------------------------------------------------


@main.command()
def health():
    """Show server and database status."""
    _run(_health_impl())


async def _health_impl():
    async with _client() as c:
        try:
            r = await c.get("/health")
        except httpx.ConnectError:
            click.secho(f"Server not reachable at {_api_url()}", fg="red", err=True)
            sys.exit(1)
        data = _check(r).json()

    color = "green" if data["status"] == "healthy" else "yellow"
    click.secho(f"{data['status']}  (v{data['version']})", fg=color, bold=True)
    click.echo(f"  database: {data['database']}")


@main.command()
@click.argument("email")
@click.argument("name")
@click.argument("password")
@click.option("--role", type=click.Choice(["agent", "admin"]), default="agent")
def register(email: str, name: str, password: str, role: str):
    """Create a user account."""
    _run(_register_impl(email, name, password, role))


async def _register_impl(email: str, name: str, password: str, role: str):
    async with _client() as c:
        r = await c.post("/auth/register", json={
            "email": email,
            "name": name,
            "password": password,
            "role": role,
        })
        user = _check(r).json()
    click.secho(f"Registered #{user['id']} {user['email']} ({user['role']})", fg="green")


@main.command()
@click.argument("email")
@click.argument("password")
@click.option("--quiet", "-q", is_flag=True, help="Print only the token")
def login(email: str, password: str, quiet: bool):
    """Log in and print a bearer token."""
    _run(_login_impl(email, password, quiet))


async def _login_impl(email: str, password: str, quiet: bool):
    async with _client() as c:
        r = await c.post("/auth/login", json={"email": email, "password": password})
        tokens = _check(r).json()

    if quiet:
        click.echo(tokens["access_token"])
        return
    click.secho(f"Logged in (expires in {tokens['expires_in']}s)", fg="green")
    click.echo(tokens["access_token"])
    click.echo("\nexport TAGBLAZE_TOKEN=<token> to use it with other commands")


@main.command()
@token_option
def me(token: Optional[str]):
    """Show the identity behind the current token."""
    _run(_me_impl(token))


async def _me_impl(token: Optional[str]):
    async with _client(token) as c:
        data = _check(await c.get("/auth/me")).json()
    click.echo(_pretty_json(data))


# ---------------------------------------------------------------------------
# Tickets
# ---------------------------------------------------------------------------


@main.command()
@token_option
def tickets(token: Optional[str]):
    """List tickets."""
    _run(_tickets_impl(token))


async def _tickets_impl(token: Optional[str]):
    async with _client(token) as c:
        rows = _check(await c.get("/tickets")).json()

    if not rows:
        click.echo("No tickets.")
        return
    click.secho(f"Tickets ({len(rows)}):", bold=True)
    for t in rows:
        status_str = click.style(t["status"], fg=_status_color(t["status"]))
        click.echo(f"  #{t['id']:<5d} {status_str:22s} {t['title'][:60]}")


@main.command("ticket-create")
@click.argument("title")
@click.option("--description", "-d", default=None)
@click.option(
    "--status",
    type=click.Choice(["open", "in_progress", "closed"]),
    default="open",
)
@token_option
def ticket_create(title: str, description: Optional[str], status: str, token: Optional[str]):
    """Open a new ticket."""
    _run(_ticket_create_impl(title, description, status, token))


async def _ticket_create_impl(title, description, status, token):
    async with _client(token) as c:
        r = await c.post("/tickets", json={
            "title": title,
            "description": description,
            "status": status,
        })
        ticket = _check(r).json()
    click.secho(f"Ticket #{ticket['id']} created", fg="green")


# ---------------------------------------------------------------------------
# Tags + relations
# ---------------------------------------------------------------------------


@main.command()
def tags():
    """List tags."""
    _run(_tags_impl())


async def _tags_impl():
    async with _client() as c:
        rows = _check(await c.get("/tags")).json()
    if not rows:
        click.echo("No tags.")
        return
    for t in rows:
        click.echo(f"  #{t['id']:<5d} {t['name']}")


@main.command("tag-create")
@click.argument("name")
@token_option
def tag_create(name: str, token: Optional[str]):
    """Create a tag."""
    _run(_tag_create_impl(name, token))


async def _tag_create_impl(name: str, token: Optional[str]):
    async with _client(token) as c:
        tag = _check(await c.post("/tags", json={"name": name})).json()
    click.secho(f"Tag #{tag['id']} '{tag['name']}' created", fg="green")


@main.command()
@click.argument("ticket_id", type=int)
@click.argument("tag_id", type=int)
@token_option
def assign(ticket_id: int, tag_id: int, token: Optional[str]):
    """Attach a tag to a ticket."""
    _run(_assign_impl(ticket_id, tag_id, token))


async def _assign_impl(ticket_id: int, tag_id: int, token: Optional[str]):
    async with _client(token) as c:
        r = await c.post(f"/relations/{ticket_id}/tags/{tag_id}")
        data = _check(r).json()
    if data["created"]:
        click.secho(f"Tag #{tag_id} assigned to ticket #{ticket_id}", fg="green")
    else:
        click.echo(f"Ticket #{ticket_id} already has tag #{tag_id}")


@main.command()
@click.argument("ticket_id", type=int)
@click.argument("tag_id", type=int)
@token_option
def unassign(ticket_id: int, tag_id: int, token: Optional[str]):
    """Detach a tag from a ticket."""
    _run(_unassign_impl(ticket_id, tag_id, token))


async def _unassign_impl(ticket_id: int, tag_id: int, token: Optional[str]):
    async with _client(token) as c:
        _check(await c.delete(f"/relations/{ticket_id}/tags/{tag_id}"))
    click.secho(f"Tag #{tag_id} removed from ticket #{ticket_id}", fg="green")


@main.command("ticket-tags")
@click.argument("ticket_id", type=int)
def ticket_tags(ticket_id: int):
    """List the tags on a ticket."""
    _run(_ticket_tags_impl(ticket_id))


async def _ticket_tags_impl(ticket_id: int):
    async with _client() as c:
        rows = _check(await c.get(f"/relations/{ticket_id}/tags")).json()
    if not rows:
        click.echo(f"Ticket #{ticket_id} has no tags.")
        return
    click.echo(", ".join(t["name"] for t in rows))


# ---------------------------------------------------------------------------
# Dev
# ---------------------------------------------------------------------------


@main.command("reset-db")
@click.confirmation_option(prompt="Wipe every table and load demo data?")
def reset_db():
    """Dev only: wipe the database and seed demo data."""
    _run(_reset_db_impl())


async def _reset_db_impl():
    async with _client() as c:
        data = _check(await c.post("/admin/dev/reset-db")).json()
    click.secho("Database reset", fg="green", bold=True)
    click.echo(_pretty_json(data))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
