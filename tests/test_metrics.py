"""Tests for Prometheus metric definitions and instrumentation."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from hypolab.errors import InvalidTransitionError
from hypolab.metrics import (
    analyses_total,
    analysis_duration_seconds,
    transition_rejections_total,
    transitions_total,
)
from hypolab.models.hypothesis import HypothesisStatus

if TYPE_CHECKING:
    from fastapi import FastAPI

    from hypolab.workflow import HypothesisWorkflow


class TestMetricDefinitions:
    """Counter._name strips '_total'; it is re-added in exported samples."""

    def test_transitions_counter(self):
        assert transitions_total._name == "hypolab_transitions"
        assert transitions_total._labelnames == ("kind", "target")

    def test_rejections_counter(self):
        assert transition_rejections_total._name == "hypolab_transition_rejections"
        assert transition_rejections_total._labelnames == ("kind", "reason")

    def test_analyses_counter(self):
        assert analyses_total._name == "hypolab_analyses"
        assert "recommended_status" in analyses_total._labelnames

    def test_analysis_histogram(self):
        assert analysis_duration_seconds._name == "hypolab_analysis_duration_seconds"


class TestMetricsEndpoint:
    def test_metrics_endpoint(self):
        from hypolab.api.app import create_app

        app = create_app()
        # Skip the DB lifespan
        app.router.lifespan_context = _noop_lifespan
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "text/plain" in response.headers.get("content-type", "")
        assert "hypolab_analysis_duration_seconds" in response.text


class TestWorkflowInstrumentation:
    def test_accepted_transition_increments_counter(
        self, workflow: HypothesisWorkflow, sample_hypothesis
    ):
        labels = {"kind": "status", "target": "RESEARCH"}
        before = _get_counter_value("hypolab_transitions", labels)
        workflow.request_transition(sample_hypothesis.id, HypothesisStatus.RESEARCH, "alice")
        assert _get_counter_value("hypolab_transitions", labels) - before == 1

    def test_rejection_increments_counter(self, workflow: HypothesisWorkflow, sample_hypothesis):
        labels = {"kind": "status", "reason": "invalid_transition"}
        before = _get_counter_value("hypolab_transition_rejections", labels)
        with pytest.raises(InvalidTransitionError):
            workflow.request_transition(sample_hypothesis.id, HypothesisStatus.VALIDATED, "alice")
        assert _get_counter_value("hypolab_transition_rejections", labels) - before == 1

    def test_analysis_increments_counter(self, workflow: HypothesisWorkflow, sample_hypothesis):
        exp = workflow.create_experiment(sample_hypothesis.id, "Interviews")
        labels = {"recommended_status": "IN_EXPERIMENT"}
        before = _get_counter_value("hypolab_analyses", labels)
        workflow.analyze_experiment(exp.id)
        assert _get_counter_value("hypolab_analyses", labels) - before == 1


# --- Helpers ---


@asynccontextmanager
async def _noop_lifespan(app: FastAPI):
    yield


def _get_counter_value(metric_name: str, labels: dict[str, str]) -> float:
    """Current counter value from the default registry (sample name carries '_total')."""
    for metric in REGISTRY.collect():
        if metric.name == metric_name:
            for sample in metric.samples:
                if sample.name == f"{metric_name}_total" and sample.labels == labels:
                    return sample.value
    return 0.0
