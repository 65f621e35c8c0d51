"""Tests for experiment analysis."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from hypolab.engine.analyzer import (
    Thresholds,
    analyze,
    build_next_steps,
    match_result,
    recommend_status,
    statistical_significance,
)
from hypolab.models.analysis import InsightType, Significance
from hypolab.models.experiment import Experiment, ExperimentResult, ExperimentType
from hypolab.models.hypothesis import (
    Hypothesis,
    HypothesisLevel,
    HypothesisStatus,
    SuccessCriteria,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
LATER = datetime(2026, 3, 2, 8, 30, tzinfo=UTC)


@pytest.fixture()
def experiment() -> Experiment:
    return Experiment(
        id=3, hypothesis_id=7, title="Pricing page test", type=ExperimentType.MVP_TEST
    )


@pytest.fixture()
def hypothesis() -> Hypothesis:
    return Hypothesis(
        id=7,
        idea_id=1,
        title="Customers pay for speed",
        status=HypothesisStatus.IN_EXPERIMENT,
        level=HypothesisLevel.LEVEL_2,
    )


def _criterion(name: str, target: float, unit: str = "") -> SuccessCriteria:
    return SuccessCriteria(name=name, target_value=target, unit=unit, hypothesis_id=7)


def _result(rid: int, metric: str, value: float, unit: str = "") -> ExperimentResult:
    return ExperimentResult(id=rid, experiment_id=3, metric_name=metric, value=value, unit=unit)


class TestMatchResult:
    def test_criterion_name_inside_metric(self):
        results = [_result(1, "Weekly Conversion Rate", 4)]
        assert match_result(_criterion("conversion", 3), results) is results[0]

    def test_metric_name_inside_criterion(self):
        results = [_result(1, "NPS", 40)]
        assert match_result(_criterion("nps after onboarding", 30), results) is results[0]

    def test_first_match_wins(self):
        results = [_result(2, "conversion (mobile)", 1), _result(1, "conversion", 9)]
        assert match_result(_criterion("conversion", 3), results).id == 2

    def test_no_match(self):
        assert match_result(_criterion("retention", 3), [_result(1, "revenue", 9)]) is None


class TestRecommendStatus:
    def test_no_results(self):
        status, reason = recommend_status(HypothesisStatus.IN_EXPERIMENT, 0, 2, 0)
        assert status == HypothesisStatus.IN_EXPERIMENT
        assert "no results" in reason

    def test_validated_threshold_is_inclusive(self):
        assert recommend_status(HypothesisStatus.IN_EXPERIMENT, 5, 5, 80)[0] == (
            HypothesisStatus.VALIDATED
        )

    def test_partial_threshold_is_inclusive(self):
        assert recommend_status(HypothesisStatus.IN_EXPERIMENT, 2, 2, 50)[0] == (
            HypothesisStatus.IN_EXPERIMENT
        )

    def test_below_partial_with_criteria(self):
        assert recommend_status(HypothesisStatus.IN_EXPERIMENT, 3, 5, 40)[0] == (
            HypothesisStatus.INVALIDATED
        )

    def test_no_criteria_keeps_current(self):
        status, reason = recommend_status(HypothesisStatus.READY_FOR_TESTING, 3, 0, 0)
        assert status == HypothesisStatus.READY_FOR_TESTING
        assert "No success criteria" in reason

    def test_custom_thresholds(self):
        strict = Thresholds(validated=90, partial=70)
        assert recommend_status(HypothesisStatus.IN_EXPERIMENT, 5, 5, 80, strict)[0] == (
            HypothesisStatus.IN_EXPERIMENT
        )


class TestStatisticalSignificance:
    @pytest.mark.parametrize(
        ("results", "criteria", "expected"),
        [
            (0, 0, Significance.INSUFFICIENT_DATA),
            (1, 3, Significance.INSUFFICIENT_DATA),
            (2, 0, Significance.MODERATE),
            (2, 1, Significance.MODERATE),
            (3, 1, Significance.SIGNIFICANT),
            (3, 0, Significance.INSUFFICIENT_DATA),
        ],
    )
    def test_buckets(self, results, criteria, expected):
        assert statistical_significance(results, criteria) == expected


class TestNextSteps:
    def test_capped_at_limit(self):
        steps = build_next_steps(HypothesisStatus.VALIDATED, 2)
        assert len(steps) == 3
        assert steps[0] == "Update the hypothesis status to VALIDATED"

    def test_invalidated_first_step(self):
        assert build_next_steps(HypothesisStatus.INVALIDATED, 1)[0] == (
            "Update the hypothesis status to INVALIDATED"
        )

    def test_no_criteria_asks_for_criteria(self):
        steps = build_next_steps(HypothesisStatus.IN_EXPERIMENT, 0)
        assert steps[0] == "Define success criteria for the hypothesis"


class TestAnalyze:
    def test_all_criteria_met(self, experiment, hypothesis):
        criteria = [_criterion("Delivery time", 20, "min"), _criterion("Willingness to pay", 60)]
        results = [_result(2, "Willingness to pay", 65), _result(1, "Delivery time", 25, "min")]

        report = analyze(experiment, hypothesis, criteria, results, NOW)

        assert all(c.achieved for c in report.criteria_analysis)
        assert report.metrics.success_rate == 100
        assert report.metrics.achieved_criteria == 2
        assert report.hypothesis.recommended_status == HypothesisStatus.VALIDATED
        assert report.hypothesis.current_status == HypothesisStatus.IN_EXPERIMENT
        assert report.next_steps[0] == "Update the hypothesis status to VALIDATED"
        assert report.insights[0].title == "Excellent results"
        assert report.generated_at == NOW

    def test_lower_value_is_not_achieved(self, experiment, hypothesis):
        criteria = [_criterion("Delivery time", 30)]
        report = analyze(experiment, hypothesis, criteria, [_result(1, "Delivery time", 25)], NOW)
        assert not report.criteria_analysis[0].achieved

    def test_zero_results(self, experiment, hypothesis):
        report = analyze(experiment, hypothesis, [_criterion("conversion", 5)], [], NOW)

        assert report.metrics.total_results == 0
        assert report.metrics.success_rate == 0
        assert report.metrics.statistical_significance == Significance.INSUFFICIENT_DATA
        assert report.hypothesis.recommended_status == HypothesisStatus.IN_EXPERIMENT
        assert "no results" in report.hypothesis.status_reason
        assert report.criteria_analysis[0].actual_value is None
        assert report.criteria_analysis[0].result is None

    def test_forty_percent_of_target(self, experiment, hypothesis):
        report = analyze(
            experiment, hypothesis, [_criterion("signups", 100)], [_result(1, "signups", 40)], NOW
        )

        analysis = report.criteria_analysis[0]
        assert not analysis.achieved
        assert analysis.achievement_percent == pytest.approx(40)
        assert report.metrics.success_rate == 0
        assert report.hypothesis.recommended_status == HypothesisStatus.INVALIDATED
        actions = [r.action for r in report.recommendations]
        assert "Rethink the hypothesis" in actions
        assert "Collect more data" in actions

    def test_exactly_eighty_percent(self, experiment, hypothesis):
        names = ["a-metric", "b-metric", "c-metric", "d-metric", "e-metric"]
        criteria = [_criterion(n, 10) for n in names]
        values = [10, 10, 10, 10, 1]
        results = [_result(i, n, v) for i, (n, v) in enumerate(zip(names, values, strict=True))]

        report = analyze(experiment, hypothesis, criteria, results, NOW)

        assert report.metrics.success_rate == 80
        assert report.hypothesis.recommended_status == HypothesisStatus.VALIDATED
        assert report.metrics.statistical_significance == Significance.SIGNIFICANT

    def test_exactly_fifty_percent(self, experiment, hypothesis):
        criteria = [_criterion("retention", 40), _criterion("revenue", 1000)]
        results = [_result(1, "retention", 45), _result(2, "revenue", 500)]

        report = analyze(experiment, hypothesis, criteria, results, NOW)

        assert report.metrics.success_rate == 50
        assert report.hypothesis.recommended_status == HypothesisStatus.IN_EXPERIMENT
        assert report.metrics.statistical_significance == Significance.MODERATE
        assert report.insights[0].type == InsightType.MIXED

    def test_idempotent(self, experiment, hypothesis):
        criteria = [_criterion("conversion", 5, "%"), _criterion("nps", 30)]
        results = [_result(1, "conversion", 7, "%"), _result(2, "nps", 12)]

        first = analyze(experiment, hypothesis, criteria, results, NOW)
        second = analyze(experiment, hypothesis, criteria, results, LATER)

        assert first.model_dump(exclude={"generated_at"}) == second.model_dump(
            exclude={"generated_at"}
        )
        assert first.generated_at != second.generated_at

    def test_empty_inputs_do_not_raise(self, experiment, hypothesis):
        report = analyze(experiment, hypothesis, [], [], NOW)
        assert report.metrics.total_criteria == 0
        assert report.criteria_analysis == []
        assert report.next_steps == [
            "Define success criteria for the hypothesis",
            "Continue collecting data",
        ]

    def test_over_achievement_insight(self, experiment, hypothesis):
        criteria = [_criterion("conversion", 5, "%")]
        report = analyze(experiment, hypothesis, criteria, [_result(1, "conversion", 8, "%")], NOW)
        titles = [i.title for i in report.insights]
        assert 'Outstanding result for "conversion"' in titles

    def test_ab_test_insight(self, hypothesis):
        ab = Experiment(id=4, hypothesis_id=7, title="Button colour", type=ExperimentType.AB_TEST)
        report = analyze(ab, hypothesis, [], [_result(1, "clicks", 3)], NOW)
        assert report.insights[-1].title == "A/B test finished"

    def test_success_rate_rounds_half_up(self, experiment, hypothesis):
        # 2 of 3 criteria met: 66.67 -> 67
        criteria = [_criterion("x1", 1), _criterion("x2", 1), _criterion("x3", 1)]
        results = [_result(1, "x1", 1), _result(2, "x2", 1), _result(3, "x3", 0.5)]
        report = analyze(experiment, hypothesis, criteria, results, NOW)
        assert report.metrics.success_rate == 67
        assert report.hypothesis.recommended_status == HypothesisStatus.IN_EXPERIMENT
