"""Smoke tests for CRM Alembic migrations."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from crm.config import settings


def test_alembic_upgrade_creates_tag_tables(tmp_path: Path, monkeypatch):
    db_path = tmp_path / "crm_migrations.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{db_path}")

    repo_root = Path(__file__).resolve().parents[2]
    cfg = Config(str(repo_root / "crm" / "alembic.ini"))
    command.upgrade(cfg, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        tag_columns = {c["name"] for c in inspector.get_columns("tag")}
    finally:
        engine.dispose()

    assert {"location", "contact", "deal", "tag", "tag_category", "deal_tag"} <= tables
    assert {"usage_count", "category", "category_id", "is_active"} <= tag_columns
