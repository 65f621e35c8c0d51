"""Shared test fixtures."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from hypolab.config import Settings
from hypolab.db import Database
from hypolab.models.hypothesis import Hypothesis
from hypolab.models.idea import Idea, IdeaStatus
from hypolab.workflow import HypothesisWorkflow

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=tmp_path / "data",
        log_level="DEBUG",
        log_format="console",
        _env_file=None,
    )


@pytest.fixture()
def db(tmp_path) -> Database:
    db = Database(tmp_path / "test.db")
    db.init_schema()
    yield db
    db.close()


@pytest.fixture()
def workflow(db: Database) -> HypothesisWorkflow:
    return HypothesisWorkflow(db, clock=lambda: FIXED_NOW)


@pytest.fixture()
def sample_idea(db: Database) -> Idea:
    return db.create_idea(
        Idea(
            title="Self-serve onboarding",
            description="Let new teams onboard without a sales call",
            status=IdeaStatus.SELECTED,
            created_by="alice",
        )
    )


@pytest.fixture()
def sample_hypothesis(workflow: HypothesisWorkflow, sample_idea: Idea) -> Hypothesis:
    return workflow.create_hypothesis(
        sample_idea.id,
        "Guided setup raises activation",
        statement="If we add a guided setup, activation will rise, because setup is the drop-off",
        description="Week-one activation is 22%; most teams stall on integration setup.",
        created_by="alice",
    )


@pytest.fixture()
def ready_hypothesis(workflow: HypothesisWorkflow, sample_hypothesis: Hypothesis) -> Hypothesis:
    """Hypothesis with every readiness fact satisfied, still in DRAFT."""
    hid = sample_hypothesis.id
    workflow.submit_desk_research(hid, "Competitors all ship a setup wizard.")
    workflow.submit_rice_score(hid, reach=1000, impact=3, confidence=80, effort=2)
    workflow.add_success_criterion("activation rate", 30, unit="%", hypothesis_id=hid)
    return workflow.get_hypothesis(hid)


@pytest.fixture()
def now() -> datetime:
    """The instant the ``workflow`` fixture's clock always returns."""
    return FIXED_NOW
