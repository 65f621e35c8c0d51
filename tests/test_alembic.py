"""Tests for Alembic migration infrastructure."""

from __future__ import annotations

from typing import TYPE_CHECKING

from alembic.config import Config
from sqlalchemy import create_engine, inspect

from alembic import command
from hypolab.db.orm import Base

if TYPE_CHECKING:
    from pathlib import Path

TABLES = {
    "ideas",
    "ice_scores",
    "hypotheses",
    "success_criteria",
    "experiments",
    "experiment_results",
    "hypothesis_transitions",
}


def _config(db_path: Path) -> Config:
    cfg = Config("alembic.ini")
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")
    return cfg


def _inspect(db_path: Path):
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        return {
            name: {
                "columns": {c["name"] for c in inspector.get_columns(name)},
                "indexes": {i["name"] for i in inspector.get_indexes(name)},
            }
            for name in inspector.get_table_names()
        }
    finally:
        engine.dispose()


class TestAlembicMigrations:
    def test_upgrade_to_head_creates_all_tables(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test_alembic.db"
        command.upgrade(_config(db_path), "head")

        tables = set(_inspect(db_path))
        assert tables == TABLES | {"alembic_version"}

    def test_columns_match_orm(self, tmp_path: Path) -> None:
        """Migrated columns line up with the ORM definitions table by table."""
        db_path = tmp_path / "test_alembic.db"
        command.upgrade(_config(db_path), "head")

        schema = _inspect(db_path)
        for name in TABLES:
            orm_columns = {c.name for c in Base.metadata.tables[name].columns}
            assert schema[name]["columns"] == orm_columns, name

    def test_lookup_indexes(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test_alembic.db"
        command.upgrade(_config(db_path), "head")

        schema = _inspect(db_path)
        assert "idx_hypotheses_idea" in schema["hypotheses"]["indexes"]
        assert "idx_experiment_results_experiment" in schema["experiment_results"]["indexes"]
        audit_indexes = schema["hypothesis_transitions"]["indexes"]
        assert "idx_hypothesis_transitions_hypothesis" in audit_indexes

    def test_downgrade_drops_all_tables(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test_alembic.db"
        cfg = _config(db_path)
        command.upgrade(cfg, "head")
        command.downgrade(cfg, "base")

        # Only alembic_version should remain
        assert set(_inspect(db_path)) == {"alembic_version"}
