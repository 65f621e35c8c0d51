"""Workflow service: runs engine decisions against the store.

The engine modules decide; this module loads snapshots, hands them to the
engine and persists what comes back. Gated hypothesis changes go through
``Database.apply_transition`` so the precondition check and the write share
one serialized transaction.
"""

from __future__ import annotations

import time as time_mod
from typing import TYPE_CHECKING

import structlog

from hypolab.engine import analyzer, state_machine
from hypolab.engine.analyzer import Thresholds
from hypolab.engine.readiness import evaluate
from hypolab.engine.scoring import ice_score_for_entry, rice_score
from hypolab.errors import (
    HypolabError,
    InvalidLevelError,
    InvalidTransitionError,
    NotFoundError,
    UnmetPreconditionError,
)
from hypolab.metrics import (
    analyses_total,
    analysis_duration_seconds,
    transition_rejections_total,
    transitions_total,
)
from hypolab.models.base import utcnow
from hypolab.models.experiment import (
    Experiment,
    ExperimentResult,
    ExperimentStatus,
    ExperimentType,
)
from hypolab.models.hypothesis import Hypothesis, HypothesisStatus, SuccessCriteria
from hypolab.models.idea import IceScore, Idea, IdeaPriority, IdeaStatus

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from hypolab.config import Settings
    from hypolab.db import Database, FunnelDict
    from hypolab.engine.readiness import Readiness
    from hypolab.engine.state_machine import TransitionOption, TransitionOutcome
    from hypolab.models.analysis import AnalysisReport
    from hypolab.models.hypothesis import HypothesisStage, HypothesisTransition

logger = structlog.get_logger()

EXPERIMENT_TRANSITIONS: dict[ExperimentStatus, frozenset[ExperimentStatus]] = {
    ExperimentStatus.PLANNING: frozenset({ExperimentStatus.RUNNING, ExperimentStatus.CANCELLED}),
    ExperimentStatus.RUNNING: frozenset(
        {ExperimentStatus.PAUSED, ExperimentStatus.COMPLETED, ExperimentStatus.CANCELLED}
    ),
    ExperimentStatus.PAUSED: frozenset({ExperimentStatus.RUNNING, ExperimentStatus.CANCELLED}),
    ExperimentStatus.COMPLETED: frozenset(),
    ExperimentStatus.CANCELLED: frozenset(),
}

_HYPOTHESIS_IDEA_STATUSES = frozenset({IdeaStatus.SELECTED, IdeaStatus.IN_HYPOTHESIS})

_REJECTION_REASONS: dict[type[HypolabError], str] = {
    InvalidTransitionError: "invalid_transition",
    UnmetPreconditionError: "unmet_precondition",
    InvalidLevelError: "invalid_level",
    NotFoundError: "not_found",
}


def thresholds_from_settings(settings: Settings) -> Thresholds:
    return Thresholds(
        validated=settings.analysis_validated_threshold,
        partial=settings.analysis_partial_threshold,
        min_results=settings.analysis_min_results,
        next_steps_limit=settings.next_steps_limit,
    )


class HypothesisWorkflow:
    """Synchronous facade over the store and the decision engine."""

    def __init__(
        self,
        db: Database,
        thresholds: Thresholds = analyzer.DEFAULT_THRESHOLDS,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.thresholds = thresholds
        self._clock = clock or utcnow

    @classmethod
    def from_settings(cls, db: Database, settings: Settings) -> HypothesisWorkflow:
        return cls(db, thresholds=thresholds_from_settings(settings))

    # --- Ideas ---

    def submit_idea(
        self,
        title: str,
        description: str = "",
        category: str = "",
        priority: IdeaPriority = IdeaPriority.MEDIUM,
        created_by: str = "",
    ) -> Idea:
        if not title.strip():
            raise ValueError("Idea title must not be empty")
        idea = self.db.create_idea(
            Idea(
                title=title,
                description=description,
                category=category,
                priority=priority,
                created_by=created_by,
            )
        )
        logger.info("Idea submitted", idea_id=idea.id, title=title)
        return idea

    def get_idea(self, idea_id: int) -> Idea:
        idea = self.db.get_idea(idea_id)
        if idea is None:
            raise NotFoundError("idea", idea_id)
        return idea

    def score_idea(
        self,
        idea_id: int,
        reach: float | None,
        impact: float | None,
        confidence: float | None,
        effort: float | None,
    ) -> Idea:
        """Store RICE inputs and the derived score. A complete score moves NEW to SCORED."""
        idea = self.get_idea(idea_id)
        score = rice_score(reach, impact, confidence, effort)
        status = idea.status
        if score is not None and status == IdeaStatus.NEW:
            status = IdeaStatus.SCORED
        return self.db.update_idea(
            idea_id,
            reach=reach,
            impact=impact,
            confidence=confidence,
            effort=effort,
            rice_score=score,
            status=status,
        )

    def submit_ice_score(
        self,
        idea_id: int,
        user_id: str,
        impact: int,
        confidence: int,
        ease: int,
        comment: str = "",
    ) -> tuple[IceScore, Idea]:
        """Replace-or-insert one user's ICE score and refresh the idea aggregate."""
        score = IceScore(
            idea_id=idea_id,
            user_id=user_id,
            impact=impact,
            confidence=confidence,
            ease=ease,
            comment=comment,
        )
        saved, idea = self.db.upsert_ice_score(score)
        logger.info(
            "ICE score submitted",
            idea_id=idea_id,
            user_id=user_id,
            ice_score=idea.ice_score,
        )
        return saved, idea

    def remove_ice_score(self, idea_id: int, user_id: str) -> Idea:
        return self.db.delete_ice_score(idea_id, user_id)

    def list_ice_scores(self, idea_id: int) -> list[IceScore]:
        self.get_idea(idea_id)
        return self.db.list_ice_scores(idea_id)

    def select_idea(self, idea_id: int) -> Idea:
        idea = self.get_idea(idea_id)
        if idea.status != IdeaStatus.SCORED:
            raise InvalidTransitionError(
                f"Only SCORED ideas can be selected (idea {idea_id} is {idea.status.value})",
                current=idea.status.value,
                target=IdeaStatus.SELECTED.value,
            )
        return self.db.update_idea(idea_id, status=IdeaStatus.SELECTED)

    def archive_idea(self, idea_id: int) -> Idea:
        idea = self.get_idea(idea_id)
        if idea.status == IdeaStatus.ARCHIVED:
            return idea
        return self.db.update_idea(idea_id, status=IdeaStatus.ARCHIVED)

    def delete_idea(self, idea_id: int) -> None:
        self.get_idea(idea_id)
        self.db.soft_delete_idea(idea_id)
        logger.info("Idea deleted", idea_id=idea_id)

    def idea_funnel(self, idea_id: int) -> FunnelDict:
        return self.db.idea_funnel(idea_id)

    # --- Hypotheses ---

    def create_hypothesis(
        self,
        idea_id: int,
        title: str,
        statement: str = "",
        description: str = "",
        confidence_level: int = 50,
        created_by: str = "",
    ) -> Hypothesis:
        """New DRAFT / LEVEL_1 hypothesis for a SELECTED (or IN_HYPOTHESIS) idea."""
        if not title.strip():
            raise ValueError("Hypothesis title must not be empty")
        hypothesis = self.db.create_hypothesis(
            Hypothesis(
                idea_id=idea_id,
                title=title,
                statement=statement,
                description=description,
                confidence_level=confidence_level,
                created_by=created_by,
            ),
            accepted_idea_statuses=_HYPOTHESIS_IDEA_STATUSES,
        )
        logger.info("Hypothesis created", hypothesis_id=hypothesis.id, idea_id=idea_id)
        return hypothesis

    def get_hypothesis(self, hypothesis_id: int) -> Hypothesis:
        hypothesis = self.db.get_hypothesis(hypothesis_id)
        if hypothesis is None:
            raise NotFoundError("hypothesis", hypothesis_id)
        return hypothesis

    def delete_hypothesis(self, hypothesis_id: int) -> None:
        self.get_hypothesis(hypothesis_id)
        self.db.soft_delete_hypothesis(hypothesis_id)

    def update_description(self, hypothesis_id: int, description: str) -> Hypothesis:
        self.get_hypothesis(hypothesis_id)
        return self.db.update_hypothesis(hypothesis_id, description=description)

    def submit_rice_score(
        self,
        hypothesis_id: int,
        reach: float | None,
        impact: float | None,
        confidence: float | None,
        effort: float | None,
    ) -> Hypothesis:
        self.get_hypothesis(hypothesis_id)
        return self.db.update_hypothesis(
            hypothesis_id,
            reach=reach,
            impact=impact,
            confidence=confidence,
            effort=effort,
            rice_score=rice_score(reach, impact, confidence, effort),
        )

    def submit_ice_score_for_hypothesis(
        self, hypothesis_id: int, impact: int, confidence: int, ease: int
    ) -> Hypothesis:
        for name, value in (("impact", impact), ("confidence", confidence), ("ease", ease)):
            if not 1 <= value <= 10:
                raise ValueError(f"ICE {name} must be between 1 and 10, got {value}")
        self.get_hypothesis(hypothesis_id)
        return self.db.update_hypothesis(
            hypothesis_id, ice_score=ice_score_for_entry(impact, confidence, ease)
        )

    def submit_desk_research(
        self,
        hypothesis_id: int,
        notes: str,
        sources: list[str] | None = None,
        risks: list[str] | None = None,
        opportunities: list[str] | None = None,
    ) -> Hypothesis:
        self.get_hypothesis(hypothesis_id)
        return self.db.update_hypothesis(
            hypothesis_id,
            desk_research_notes=notes,
            desk_research_sources=sources or [],
            risks=risks or [],
            opportunities=opportunities or [],
            desk_research_date=self._clock(),
        )

    def add_success_criterion(
        self,
        name: str,
        target_value: float,
        unit: str = "",
        description: str = "",
        hypothesis_id: int | None = None,
        experiment_id: int | None = None,
    ) -> SuccessCriteria:
        if target_value <= 0:
            raise ValueError("Success criterion target must be positive")
        return self.db.add_success_criterion(
            SuccessCriteria(
                name=name,
                target_value=target_value,
                unit=unit,
                description=description,
                hypothesis_id=hypothesis_id,
                experiment_id=experiment_id,
            )
        )

    def record_actual_value(self, criterion_id: int, actual_value: float | None) -> SuccessCriteria:
        return self.db.record_actual_value(criterion_id, actual_value)

    def readiness(self, hypothesis_id: int) -> tuple[Readiness, list[TransitionOption]]:
        hypothesis = self.get_hypothesis(hypothesis_id)
        return evaluate(hypothesis), state_machine.available_transitions(hypothesis)

    def list_transitions(self, hypothesis_id: int) -> list[HypothesisTransition]:
        self.get_hypothesis(hypothesis_id)
        return self.db.list_transitions(hypothesis_id)

    # --- Gated hypothesis changes ---

    def request_transition(
        self, hypothesis_id: int, target: HypothesisStatus, actor: str
    ) -> Hypothesis:
        return self._apply(
            "status",
            target.value,
            hypothesis_id,
            lambda h: state_machine.request_transition(h, target, actor, self._clock()),
        )

    def request_stage_transition(
        self, hypothesis_id: int, target: HypothesisStage, actor: str
    ) -> Hypothesis:
        return self._apply(
            "stage",
            target.value,
            hypothesis_id,
            lambda h: state_machine.request_stage_transition(h, target, actor, self._clock()),
        )

    def promote_to_level_2(self, hypothesis_id: int, actor: str) -> Hypothesis:
        return self._apply(
            "level",
            "LEVEL_2",
            hypothesis_id,
            lambda h: state_machine.promote_to_level_2(h, actor, self._clock()),
        )

    def _apply(
        self,
        kind: str,
        target: str,
        hypothesis_id: int,
        decide: Callable[[Hypothesis], TransitionOutcome],
    ) -> Hypothesis:
        log = logger.bind(hypothesis_id=hypothesis_id, kind=kind, target=target)
        try:
            hypothesis, transition = self.db.apply_transition(hypothesis_id, decide)
        except HypolabError as exc:
            reason = _REJECTION_REASONS.get(type(exc), "other")
            transition_rejections_total.labels(kind=kind, reason=reason).inc()
            log.info("Transition rejected", reason=reason, error=str(exc))
            raise
        transitions_total.labels(kind=kind, target=target).inc()
        log.info(
            "Transition accepted",
            actor=transition.actor,
            from_status=transition.from_status.value,
            to_status=transition.to_status.value,
        )
        return hypothesis

    # --- Experiments ---

    def create_experiment(
        self,
        hypothesis_id: int,
        title: str,
        type: ExperimentType = ExperimentType.OTHER,  # noqa: A002
        description: str = "",
        methodology: str = "",
        success_metrics: str = "",
        created_by: str = "",
    ) -> Experiment:
        experiment = self.db.create_experiment(
            Experiment(
                hypothesis_id=hypothesis_id,
                title=title,
                type=type,
                description=description,
                methodology=methodology,
                success_metrics=success_metrics,
                created_by=created_by,
            )
        )
        logger.info(
            "Experiment created", experiment_id=experiment.id, hypothesis_id=hypothesis_id
        )
        return experiment

    def get_experiment(self, experiment_id: int) -> Experiment:
        experiment = self.db.get_experiment(experiment_id)
        if experiment is None:
            raise NotFoundError("experiment", experiment_id)
        return experiment

    def change_experiment_status(
        self, experiment_id: int, status: ExperimentStatus
    ) -> Experiment:
        experiment = self.get_experiment(experiment_id)
        if status not in EXPERIMENT_TRANSITIONS[experiment.status]:
            raise InvalidTransitionError(
                f"Cannot move experiment from {experiment.status.value} to {status.value}",
                current=experiment.status.value,
                target=status.value,
            )
        now = self._clock()
        first_start = status == ExperimentStatus.RUNNING and experiment.start_date is None
        start = now if first_start else None
        end = now if status in (ExperimentStatus.COMPLETED, ExperimentStatus.CANCELLED) else None
        updated = self.db.update_experiment_status(
            experiment_id, status, start_date=start, end_date=end
        )
        logger.info(
            "Experiment status changed",
            experiment_id=experiment_id,
            from_status=experiment.status.value,
            to_status=status.value,
        )
        return updated

    def record_result(
        self,
        experiment_id: int,
        metric_name: str,
        value: float,
        unit: str = "",
        notes: str = "",
    ) -> ExperimentResult:
        return self.db.add_result(
            ExperimentResult(
                experiment_id=experiment_id,
                metric_name=metric_name,
                value=value,
                unit=unit,
                notes=notes,
            )
        )

    def list_results(self, experiment_id: int) -> list[ExperimentResult]:
        self.get_experiment(experiment_id)
        return self.db.list_results(experiment_id)

    def experiment_criteria(self, experiment_id: int) -> list[SuccessCriteria]:
        """Experiment-scoped criteria, falling back to the hypothesis' criteria."""
        experiment = self.get_experiment(experiment_id)
        criteria = self.db.list_experiment_criteria(experiment_id)
        if criteria:
            return criteria
        return self.get_hypothesis(experiment.hypothesis_id).success_criteria

    # --- Analysis ---

    def analyze_experiment(self, experiment_id: int) -> AnalysisReport:
        experiment = self.get_experiment(experiment_id)
        hypothesis = self.get_hypothesis(experiment.hypothesis_id)
        criteria = self.experiment_criteria(experiment_id)
        results = self.db.list_results(experiment_id)

        start = time_mod.monotonic()
        report = analyzer.analyze(
            experiment, hypothesis, criteria, results, self._clock(), self.thresholds
        )
        analysis_duration_seconds.observe(time_mod.monotonic() - start)
        analyses_total.labels(
            recommended_status=report.hypothesis.recommended_status.value
        ).inc()
        logger.info(
            "Analysis generated",
            experiment_id=experiment_id,
            success_rate=report.metrics.success_rate,
            recommended_status=report.hypothesis.recommended_status.value,
        )
        return report

    def apply_recommendation(
        self, experiment_id: int, actor: str
    ) -> tuple[AnalysisReport, Hypothesis]:
        """Analyze, then request a transition to the recommended status.

        When the recommendation equals the current status nothing is written.
        Otherwise the request is gated like any other transition and may raise.
        """
        report = self.analyze_experiment(experiment_id)
        verdict = report.hypothesis
        if verdict.recommended_status == verdict.current_status:
            logger.info(
                "Recommendation matches current status",
                experiment_id=experiment_id,
                status=verdict.current_status.value,
            )
            return report, self.get_hypothesis(verdict.id)
        hypothesis = self.request_transition(verdict.id, verdict.recommended_status, actor)
        return report, hypothesis
