"""Tests for the hypothesis status / level / stage state machine."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from hypolab.engine.state_machine import (
    ALLOWED_TRANSITIONS,
    NEXT_STAGE,
    STATUS_LEVELS,
    HypothesisStateMachine,
    available_transitions,
    promote_to_level_2,
    request_stage_transition,
    request_transition,
    status_for_stage,
)
from hypolab.errors import InvalidLevelError, InvalidTransitionError, UnmetPreconditionError
from hypolab.models.hypothesis import (
    Hypothesis,
    HypothesisLevel,
    HypothesisStage,
    HypothesisStatus,
    SuccessCriteria,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

S = HypothesisStatus


def _hypothesis(**kwargs) -> Hypothesis:
    kwargs.setdefault("id", 7)
    return Hypothesis(idea_id=1, title="H", **kwargs)


def _ready(**kwargs) -> Hypothesis:
    return _hypothesis(
        description="Activation is low",
        desk_research_notes="Competitor review",
        reach=1000,
        impact=3,
        confidence=80,
        effort=2,
        success_criteria=[SuccessCriteria(name="activation", target_value=30)],
        **kwargs,
    )


class TestTables:
    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            ALLOWED_TRANSITIONS[S.DRAFT] = frozenset()  # type: ignore[index]

    def test_terminal_statuses(self):
        assert ALLOWED_TRANSITIONS[S.VALIDATED] == frozenset()

    def test_levels(self):
        assert STATUS_LEVELS[S.DRAFT] == HypothesisLevel.LEVEL_1
        assert STATUS_LEVELS[S.RESEARCH] == HypothesisLevel.LEVEL_1
        assert STATUS_LEVELS[S.SCORED] == HypothesisLevel.LEVEL_2
        assert STATUS_LEVELS[S.VALIDATED] == HypothesisLevel.LEVEL_2

    def test_stage_chain(self):
        assert NEXT_STAGE[HypothesisStage.DESK_RESEARCH] == HypothesisStage.EXPERIMENT_DESIGN
        assert HypothesisStage.CONCLUSION not in NEXT_STAGE

    def test_status_for_stage(self):
        assert status_for_stage(HypothesisStage.EXPERIMENT_EXECUTION, S.SCORED) == S.IN_EXPERIMENT
        assert status_for_stage(HypothesisStage.CONCLUSION, S.VALIDATED) == S.COMPLETED
        assert status_for_stage(HypothesisStage.EXPERIMENT_DESIGN, S.SCORED) == S.SCORED


class TestRequestTransition:
    def test_draft_to_research(self):
        h = _hypothesis(description="why")
        updated, transition = request_transition(h, S.RESEARCH, "alice", NOW)
        assert updated.status == S.RESEARCH
        assert updated.level == HypothesisLevel.LEVEL_1
        assert updated.stage is None
        assert updated.version == h.version + 1
        assert transition.from_status == S.DRAFT
        assert transition.to_status == S.RESEARCH
        assert transition.actor == "alice"
        assert transition.created_at == NOW

    def test_input_snapshot_unchanged(self):
        h = _hypothesis(description="why")
        request_transition(h, S.RESEARCH, "alice", NOW)
        assert h.status == S.DRAFT

    def test_skipping_is_rejected(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            request_transition(_ready(), S.IN_EXPERIMENT, "alice", NOW)
        assert exc_info.value.current == "DRAFT"
        assert exc_info.value.target == "IN_EXPERIMENT"

    def test_research_to_scored_requires_desk_research(self):
        h = _hypothesis(status=S.RESEARCH, description="why")
        with pytest.raises(UnmetPreconditionError) as exc_info:
            request_transition(h, S.SCORED, "alice", NOW)
        assert exc_info.value.missing == ["hasDeskResearch"]

    def test_missing_facts_in_canonical_order(self):
        h = _hypothesis(status=S.SCORED, level=HypothesisLevel.LEVEL_2)
        with pytest.raises(UnmetPreconditionError) as exc_info:
            request_transition(h, S.READY_FOR_TESTING, "alice", NOW)
        assert exc_info.value.missing == [
            "hasDescription",
            "hasDeskResearch",
            "hasRiceScoring",
            "hasSuccessCriteria",
        ]

    def test_entering_level_2_sets_desk_research_stage(self):
        h = _ready(status=S.RESEARCH)
        updated, transition = request_transition(h, S.SCORED, "alice", NOW)
        assert updated.level == HypothesisLevel.LEVEL_2
        assert updated.stage == HypothesisStage.DESK_RESEARCH
        assert transition.from_level == HypothesisLevel.LEVEL_1
        assert transition.to_level == HypothesisLevel.LEVEL_2

    def test_existing_stage_is_kept(self):
        h = _ready(
            status=S.READY_FOR_TESTING,
            level=HypothesisLevel.LEVEL_2,
            stage=HypothesisStage.EXPERIMENT_DESIGN,
        )
        updated, _ = request_transition(h, S.IN_EXPERIMENT, "alice", NOW)
        assert updated.stage == HypothesisStage.EXPERIMENT_DESIGN

    def test_iteration_back_to_research_drops_to_level_1(self):
        h = _hypothesis(
            status=S.ITERATION,
            level=HypothesisLevel.LEVEL_2,
            stage=HypothesisStage.CONCLUSION,
            description="why",
        )
        updated, _ = request_transition(h, S.RESEARCH, "alice", NOW)
        assert updated.level == HypothesisLevel.LEVEL_1
        assert updated.stage is None

    def test_outcome_transitions_are_ungated(self):
        h = _hypothesis(status=S.IN_EXPERIMENT, level=HypothesisLevel.LEVEL_2)
        for target in (S.VALIDATED, S.INVALIDATED, S.ITERATION):
            updated, _ = request_transition(h, target, "alice", NOW)
            assert updated.status == target

    def test_validated_is_terminal(self):
        h = _hypothesis(status=S.VALIDATED, level=HypothesisLevel.LEVEL_2)
        with pytest.raises(InvalidTransitionError):
            request_transition(h, S.ITERATION, "alice", NOW)


class TestAvailableTransitions:
    def test_lists_adjacent_targets_with_missing_facts(self):
        h = _hypothesis(status=S.IN_EXPERIMENT, level=HypothesisLevel.LEVEL_2)
        options = available_transitions(h)
        assert [o.status for o in options] == [S.VALIDATED, S.INVALIDATED, S.ITERATION]
        assert all(o.allowed for o in options)

    def test_blocked_option(self):
        [option] = available_transitions(_hypothesis())
        assert option.status == S.RESEARCH
        assert not option.allowed
        assert [f.value for f in option.missing] == ["hasDescription"]


class TestStageTransition:
    def test_level_1_is_rejected(self):
        with pytest.raises(InvalidLevelError):
            request_stage_transition(_hypothesis(), HypothesisStage.EXPERIMENT_DESIGN, "bob", NOW)

    def test_advance_to_next_stage(self):
        h = _hypothesis(
            status=S.SCORED, level=HypothesisLevel.LEVEL_2, stage=HypothesisStage.DESK_RESEARCH
        )
        updated, transition = request_stage_transition(
            h, HypothesisStage.EXPERIMENT_DESIGN, "bob", NOW
        )
        assert updated.stage == HypothesisStage.EXPERIMENT_DESIGN
        assert updated.status == S.SCORED
        assert transition.from_stage == HypothesisStage.DESK_RESEARCH
        assert transition.to_stage == HypothesisStage.EXPERIMENT_DESIGN

    def test_execution_stage_moves_status(self):
        h = _hypothesis(
            status=S.READY_FOR_TESTING,
            level=HypothesisLevel.LEVEL_2,
            stage=HypothesisStage.EXPERIMENT_DESIGN,
        )
        updated, _ = request_stage_transition(h, HypothesisStage.EXPERIMENT_EXECUTION, "bob", NOW)
        assert updated.status == S.IN_EXPERIMENT

    def test_conclusion_completes(self):
        h = _hypothesis(
            status=S.VALIDATED,
            level=HypothesisLevel.LEVEL_2,
            stage=HypothesisStage.EXPERIMENT_EXECUTION,
        )
        updated, _ = request_stage_transition(h, HypothesisStage.CONCLUSION, "bob", NOW)
        assert updated.status == S.COMPLETED

    def test_skipping_stage_is_rejected(self):
        h = _hypothesis(
            status=S.SCORED, level=HypothesisLevel.LEVEL_2, stage=HypothesisStage.DESK_RESEARCH
        )
        with pytest.raises(InvalidTransitionError):
            request_stage_transition(h, HypothesisStage.CONCLUSION, "bob", NOW)


class TestPromotion:
    def test_requires_research_and_scoring(self):
        with pytest.raises(UnmetPreconditionError) as exc_info:
            promote_to_level_2(_hypothesis(desk_research_notes="found"), "carol", NOW)
        assert exc_info.value.missing == ["hasRiceScoring"]

    def test_promotes_and_keeps_status(self):
        h = _hypothesis(status=S.RESEARCH, desk_research_notes="found", ice_score=7)
        updated, transition = promote_to_level_2(h, "carol", NOW)
        assert updated.level == HypothesisLevel.LEVEL_2
        assert updated.stage == HypothesisStage.DESK_RESEARCH
        assert updated.status == S.RESEARCH
        assert transition.to_level == HypothesisLevel.LEVEL_2

    def test_promoted_draft_stays_level_2_moving_forward(self):
        h = _ready(status=S.DRAFT)
        promoted, _ = promote_to_level_2(h, "carol", NOW)
        moved, transition = request_transition(promoted, S.RESEARCH, "carol", NOW)
        assert moved.status == S.RESEARCH
        assert moved.level == HypothesisLevel.LEVEL_2
        assert moved.stage == HypothesisStage.DESK_RESEARCH
        assert transition.from_level == HypothesisLevel.LEVEL_2
        assert transition.to_level == HypothesisLevel.LEVEL_2

    def test_promoted_keeps_advanced_stage(self):
        h = _ready(
            status=S.DRAFT,
            level=HypothesisLevel.LEVEL_2,
            stage=HypothesisStage.EXPERIMENT_DESIGN,
        )
        moved, _ = request_transition(h, S.RESEARCH, "carol", NOW)
        assert moved.stage == HypothesisStage.EXPERIMENT_DESIGN

    def test_level_2_cannot_be_promoted(self):
        h = _ready(status=S.SCORED, level=HypothesisLevel.LEVEL_2)
        with pytest.raises(InvalidLevelError):
            promote_to_level_2(h, "carol", NOW)


class TestHypothesisStateMachine:
    def test_uses_injected_clock(self):
        machine = HypothesisStateMachine(clock=lambda: NOW)
        updated, transition = machine.request_transition(
            _hypothesis(description="why"), S.RESEARCH, "dave"
        )
        assert updated.updated_at == NOW
        assert transition.created_at == NOW

    def test_readiness(self):
        machine = HypothesisStateMachine()
        assert machine.readiness(_ready()).ready_for_level_2
