"""Alembic migration tests against a throwaway SQLite file.

Learn: These drive env.py exactly like `alembic -x database_url=... upgrade
head` does, through alembic.command with the repo's own alembic.ini. They
are sync tests because env.py starts its own event loop.
"""

import argparse
import io
import sqlite3
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

ROOT = Path(__file__).resolve().parents[1]


def _config(database_url: str, output_buffer=None) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"), output_buffer=output_buffer)
    cfg.set_main_option("script_location", str(ROOT / "src/tagblaze/db/migrations"))
    cfg.cmd_opts = argparse.Namespace(x=[f"database_url={database_url}"])
    cfg.attributes["configure_logger"] = False
    return cfg


def _tables(path: Path) -> set[str]:
    with sqlite3.connect(path) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        return {name for (name,) in rows}


@pytest.fixture
def db_file(tmp_path):
    return tmp_path / "migrate.db"


def test_upgrade_uses_x_argument_url(db_file):
    command.upgrade(_config(f"sqlite+aiosqlite:///{db_file}"), "head")

    assert {"users", "tickets", "tags", "ticket_tags", "alembic_version"} <= _tables(db_file)


def test_upgraded_schema_enforces_case_insensitive_tag_names(db_file):
    command.upgrade(_config(f"sqlite+aiosqlite:///{db_file}"), "head")

    with sqlite3.connect(db_file) as conn:
        conn.execute("INSERT INTO tags (name) VALUES ('Bug')")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO tags (name) VALUES ('bUG')")


def test_downgrade_to_base_drops_everything(db_file):
    cfg = _config(f"sqlite+aiosqlite:///{db_file}")
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    assert _tables(db_file) == {"alembic_version"}


def test_offline_mode_renders_sql_without_connecting(db_file):
    buf = io.StringIO()
    command.upgrade(_config(f"sqlite+aiosqlite:///{db_file}", output_buffer=buf), "head", sql=True)

    sql = buf.getvalue()
    assert "CREATE TABLE ticket_tags" in sql
    assert "ON DELETE CASCADE" in sql
    assert not db_file.exists()
