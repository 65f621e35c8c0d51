"""Tests for Pydantic domain models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from hypolab.models.analysis import AnalysisMetrics, Significance
from hypolab.models.experiment import Experiment, ExperimentResult, ExperimentStatus, ExperimentType
from hypolab.models.hypothesis import (
    Hypothesis,
    HypothesisLevel,
    HypothesisStage,
    HypothesisStatus,
    HypothesisTransition,
    SuccessCriteria,
)
from hypolab.models.idea import IceScore, Idea, IdeaPriority, IdeaStatus


class TestIdea:
    def test_create_minimal(self):
        idea = Idea(title="Usage-based pricing")
        assert idea.id is None
        assert idea.status == IdeaStatus.NEW
        assert idea.priority == IdeaPriority.MEDIUM
        assert idea.rice_score is None
        assert idea.created_at.tzinfo is not None

    def test_frozen(self):
        idea = Idea(title="Test")
        with pytest.raises(ValidationError):
            idea.title = "Changed"

    def test_model_copy_update(self):
        idea = Idea(title="Original")
        updated = idea.model_copy(update={"status": IdeaStatus.SCORED})
        assert updated.status == IdeaStatus.SCORED
        assert idea.status == IdeaStatus.NEW


class TestIceScore:
    def test_valid(self):
        score = IceScore(idea_id=1, user_id="u1", impact=10, confidence=1, ease=5)
        assert score.comment == ""

    @pytest.mark.parametrize("field", ["impact", "confidence", "ease"])
    def test_out_of_range(self, field):
        values = {"impact": 5, "confidence": 5, "ease": 5, field: 0}
        with pytest.raises(ValidationError):
            IceScore(idea_id=1, user_id="u1", **values)


class TestHypothesis:
    def test_defaults(self):
        h = Hypothesis(idea_id=1, title="H")
        assert h.status == HypothesisStatus.DRAFT
        assert h.level == HypothesisLevel.LEVEL_1
        assert h.stage is None
        assert h.version == 0
        assert h.success_criteria == []

    def test_stage_requires_level_2(self):
        with pytest.raises(ValidationError, match="LEVEL_2"):
            Hypothesis(idea_id=1, title="H", stage=HypothesisStage.DESK_RESEARCH)

    def test_level_2_with_stage(self):
        h = Hypothesis(
            idea_id=1,
            title="H",
            level=HypothesisLevel.LEVEL_2,
            stage=HypothesisStage.EXPERIMENT_DESIGN,
        )
        assert h.stage == HypothesisStage.EXPERIMENT_DESIGN

    def test_confidence_level_bounds(self):
        with pytest.raises(ValidationError):
            Hypothesis(idea_id=1, title="H", confidence_level=101)

    def test_serialization_roundtrip(self):
        h = Hypothesis(
            idea_id=1,
            title="Roundtrip",
            desk_research_sources=["a", "b"],
            success_criteria=[SuccessCriteria(name="nps", target_value=40, actual_value=45)],
        )
        restored = Hypothesis.model_validate_json(h.model_dump_json())
        assert restored == h


class TestSuccessCriteria:
    def test_not_achieved_without_actual(self):
        assert not SuccessCriteria(name="x", target_value=10).achieved

    def test_achieved_at_target(self):
        assert SuccessCriteria(name="x", target_value=10, actual_value=10).achieved

    def test_below_target(self):
        # 25 days against a 30-day target is below target: higher is better.
        assert not SuccessCriteria(name="delivery time", target_value=30, actual_value=25).achieved

    def test_achieved_is_serialized(self):
        dumped = SuccessCriteria(name="x", target_value=1, actual_value=2).model_dump()
        assert dumped["achieved"] is True


class TestExperiment:
    def test_defaults(self):
        exp = Experiment(hypothesis_id=1, title="Smoke test")
        assert exp.status == ExperimentStatus.PLANNING
        assert exp.type == ExperimentType.OTHER
        assert exp.start_date is None

    def test_result_requires_value(self):
        with pytest.raises(ValidationError):
            ExperimentResult(experiment_id=1, metric_name="conversion")


class TestTransition:
    def test_create(self):
        t = HypothesisTransition(
            hypothesis_id=1,
            from_status=HypothesisStatus.DRAFT,
            to_status=HypothesisStatus.RESEARCH,
            from_level=HypothesisLevel.LEVEL_1,
            to_level=HypothesisLevel.LEVEL_1,
            actor="alice",
            created_at=datetime(2026, 1, 1, tzinfo=UTC),
        )
        assert t.reason == ""
        assert t.to_stage is None


class TestAnalysisModels:
    def test_significance_wire_values(self):
        assert [s.value for s in Significance] == ["insufficient_data", "moderate", "significant"]

    def test_metrics(self):
        m = AnalysisMetrics(
            total_results=2,
            total_criteria=1,
            achieved_criteria=1,
            success_rate=100,
            statistical_significance=Significance.MODERATE,
        )
        assert m.model_dump(mode="json")["statistical_significance"] == "moderate"
