"""Experiment outcome analysis.

Maps recorded results onto declared success criteria, computes achievement
and an overall success rate, recommends the next hypothesis status and
produces templated insights, recommendations and next steps. Read-only:
the recommendation is never applied here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from hypolab.models.analysis import (
    AnalysisMetrics,
    AnalysisReport,
    CriterionAnalysis,
    ExperimentSummary,
    HypothesisVerdict,
    Insight,
    InsightType,
    MatchedResult,
    Recommendation,
    Significance,
)
from hypolab.models.experiment import ExperimentType
from hypolab.models.hypothesis import HypothesisStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from hypolab.models.experiment import Experiment, ExperimentResult
    from hypolab.models.hypothesis import Hypothesis, SuccessCriteria

logger = structlog.get_logger()

OVER_ACHIEVEMENT_PERCENT = 120.0


@dataclass(frozen=True)
class Thresholds:
    validated: float = 80.0
    partial: float = 50.0
    min_results: int = 3
    next_steps_limit: int = 3


DEFAULT_THRESHOLDS = Thresholds()


def match_result(
    criterion: SuccessCriteria, results: Sequence[ExperimentResult]
) -> ExperimentResult | None:
    """First result whose metric name contains the criterion name, or vice versa.

    Case-insensitive substring match in either direction; no ranking of match
    quality. Kept behind this function so it can be replaced by an explicit
    result -> criterion link.
    """
    name = criterion.name.lower()
    for result in results:
        metric = result.metric_name.lower()
        if name in metric or metric in name:
            return result
    return None


def analyze_criterion(
    criterion: SuccessCriteria, results: Sequence[ExperimentResult]
) -> CriterionAnalysis:
    matched = match_result(criterion, results)
    if matched is None:
        return CriterionAnalysis(
            criterion_id=criterion.id,
            name=criterion.name,
            description=criterion.description,
            target_value=criterion.target_value,
            unit=criterion.unit,
        )

    # A zero target is a caller error and raises ZeroDivisionError.
    return CriterionAnalysis(
        criterion_id=criterion.id,
        name=criterion.name,
        description=criterion.description,
        target_value=criterion.target_value,
        unit=criterion.unit,
        actual_value=matched.value,
        achieved=matched.value >= criterion.target_value,
        achievement_percent=matched.value / criterion.target_value * 100,
        result=MatchedResult(
            id=matched.id,
            metric_name=matched.metric_name,
            value=matched.value,
            unit=matched.unit,
        ),
    )


def success_rate(criteria: Sequence[CriterionAnalysis]) -> float:
    if not criteria:
        return 0.0
    return sum(1 for c in criteria if c.achieved) / len(criteria) * 100


def recommend_status(
    current: HypothesisStatus,
    total_results: int,
    total_criteria: int,
    rate: float,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> tuple[HypothesisStatus, str]:
    """Deterministic recommendation, evaluated top to bottom."""
    if total_results == 0:
        return HypothesisStatus.IN_EXPERIMENT, "Insufficient data: no results recorded yet"
    if rate >= thresholds.validated:
        return (
            HypothesisStatus.VALIDATED,
            f"Most success criteria were met ({_pct(rate)}%)",
        )
    if rate >= thresholds.partial:
        return (
            HypothesisStatus.IN_EXPERIMENT,
            f"Partial success ({_pct(rate)}%), needs more analysis",
        )
    if total_criteria > 0:
        return (
            HypothesisStatus.INVALIDATED,
            f"Success criteria were not met ({_pct(rate)}%)",
        )
    return current, "No success criteria defined; status unchanged"


def statistical_significance(total_results: int, total_criteria: int) -> Significance:
    """Coarse heuristic, not a statistical test."""
    if total_results < 2:
        return Significance.INSUFFICIENT_DATA
    if total_results >= 3 and total_criteria > 0:
        return Significance.SIGNIFICANT
    if total_results == 2:
        return Significance.MODERATE
    return Significance.INSUFFICIENT_DATA


def build_insights(
    experiment: Experiment,
    criteria: Sequence[CriterionAnalysis],
    rate: float,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> list[Insight]:
    insights: list[Insight] = []

    if rate >= thresholds.validated:
        insights.append(
            Insight(
                type=InsightType.SUCCESS,
                title="Excellent results",
                description=f"The experiment met {_pct(rate)}% of its success criteria.",
            )
        )
    elif rate >= thresholds.partial:
        insights.append(
            Insight(
                type=InsightType.MIXED,
                title="Mixed results",
                description=f"Partial success: {_pct(rate)}% of success criteria were met.",
            )
        )
    elif rate > 0:
        insights.append(
            Insight(
                type=InsightType.WARNING,
                title="Results below expectations",
                description=(
                    f"Only {_pct(rate)}% of success criteria were met. "
                    "The causes need to be analysed."
                ),
            )
        )

    for c in criteria:
        if c.achieved and c.achievement_percent > OVER_ACHIEVEMENT_PERCENT:
            insights.append(
                Insight(
                    type=InsightType.SUCCESS,
                    title=f'Outstanding result for "{c.name}"',
                    description=(
                        f"{_measure(c.actual_value, c.unit)} beat the target by "
                        f"{_pct(c.achievement_percent - 100)}%"
                    ),
                )
            )
        elif not c.achieved and c.actual_value is not None:
            gap = (c.target_value - c.actual_value) / c.target_value * 100
            insights.append(
                Insight(
                    type=InsightType.INFO,
                    title=f'Analysis of "{c.name}"',
                    description=(
                        f"{_measure(c.actual_value, c.unit)} missed the target by {_pct(gap)}%"
                    ),
                )
            )

    if experiment.type == ExperimentType.AB_TEST:
        insights.append(
            Insight(
                type=InsightType.INFO,
                title="A/B test finished",
                description="Consider an additional analysis of user segments.",
            )
        )

    return insights


def build_recommendations(
    total_results: int,
    rate: float,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> list[Recommendation]:
    if rate >= thresholds.validated:
        recommendations = [
            Recommendation(
                priority="high",
                action="Scale up the solution",
                description="Roll the change out to all users in production",
                timeframe="1-2 weeks",
            ),
            Recommendation(
                priority="medium",
                action="Monitor long-term effects",
                description="Track the metrics for 1-3 months after rollout",
                timeframe="1-3 months",
            ),
        ]
    elif rate >= thresholds.partial:
        recommendations = [
            Recommendation(
                priority="high",
                action="Investigate the partial success",
                description="Find out why some metrics did not reach their targets",
                timeframe="1 week",
            ),
            Recommendation(
                priority="medium",
                action="Run additional research",
                description="Start qualitative research to understand users better",
                timeframe="2-3 weeks",
            ),
        ]
    else:
        recommendations = [
            Recommendation(
                priority="high",
                action="Rethink the hypothesis",
                description="Critically review the original hypothesis and its assumptions",
                timeframe="1-2 weeks",
            ),
            Recommendation(
                priority="medium",
                action="Investigate the causes of failure",
                description="Run a root cause analysis to understand what went wrong",
                timeframe="1 week",
            ),
        ]

    if total_results < thresholds.min_results:
        recommendations.append(
            Recommendation(
                priority="medium",
                action="Collect more data",
                description="Record additional metrics for a more complete analysis",
                timeframe="Ongoing",
            )
        )
    return recommendations


def build_next_steps(
    recommended: HypothesisStatus,
    total_criteria: int,
    limit: int = DEFAULT_THRESHOLDS.next_steps_limit,
) -> list[str]:
    """Ordered action items for the recommended (not current) status."""
    match recommended:
        case HypothesisStatus.VALIDATED:
            steps = [
                "Update the hypothesis status to VALIDATED",
                "Prepare a production rollout plan",
                "Document the insights gained",
                "Schedule monitoring of post-launch metrics",
            ]
        case HypothesisStatus.INVALIDATED:
            steps = [
                "Update the hypothesis status to INVALIDATED",
                "Hold an experiment retrospective",
                "Formulate new hypotheses from the collected data",
                "Capture learnings for future experiments",
            ]
        case HypothesisStatus.IN_EXPERIMENT if total_criteria == 0:
            steps = [
                "Define success criteria for the hypothesis",
                "Continue collecting data",
            ]
        case HypothesisStatus.IN_EXPERIMENT:
            steps = [
                "Collect additional data",
                "Run an in-depth analysis of the results",
                "Consider extending the experiment",
            ]
        case _:
            steps = [
                "Finish collecting experiment data",
                "Run a complete analysis of the results",
            ]
    return steps[:limit]


def analyze(
    experiment: Experiment,
    hypothesis: Hypothesis,
    success_criteria: Sequence[SuccessCriteria],
    results: Sequence[ExperimentResult],
    now: datetime,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> AnalysisReport:
    """Build the analysis report for one experiment snapshot.

    Never raises for empty criteria or empty results. Apart from
    ``generated_at`` the output is a pure function of the inputs.
    """
    criteria = [analyze_criterion(c, results) for c in success_criteria]
    rate = success_rate(criteria)
    total_results = len(results)
    total_criteria = len(criteria)

    recommended, reason = recommend_status(
        hypothesis.status, total_results, total_criteria, rate, thresholds
    )

    report = AnalysisReport(
        experiment=ExperimentSummary(
            id=experiment.id,
            title=experiment.title,
            status=experiment.status,
            type=experiment.type,
        ),
        hypothesis=HypothesisVerdict(
            id=hypothesis.id,
            title=hypothesis.title,
            statement=hypothesis.statement,
            current_status=hypothesis.status,
            recommended_status=recommended,
            status_reason=reason,
        ),
        metrics=AnalysisMetrics(
            total_results=total_results,
            total_criteria=total_criteria,
            achieved_criteria=sum(1 for c in criteria if c.achieved),
            success_rate=_round_half_up(rate),
            statistical_significance=statistical_significance(total_results, total_criteria),
        ),
        criteria_analysis=criteria,
        insights=build_insights(experiment, criteria, rate, thresholds),
        recommendations=build_recommendations(total_results, rate, thresholds),
        next_steps=build_next_steps(recommended, total_criteria, thresholds.next_steps_limit),
        generated_at=now,
    )
    logger.debug(
        "Experiment analysed",
        experiment_id=experiment.id,
        success_rate=report.metrics.success_rate,
        recommended_status=recommended.value,
    )
    return report


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _pct(value: float) -> str:
    return str(_round_half_up(value))


def _measure(value: float | None, unit: str) -> str:
    text = f"{value:g}" if value is not None else "-"
    return f"{text} {unit}" if unit else text
