"""Experiment endpoints: lifecycle, results and analysis."""

from __future__ import annotations

from fastapi import APIRouter

from hypolab.api.deps import WorkflowDep
from hypolab.api.schemas import (
    ActorRequest,
    ApplyRecommendationResponse,
    ExperimentCreateRequest,
    ExperimentListResponse,
    ExperimentStatusRequest,
    ResultListResponse,
    ResultRequest,
    SuccessCriterionRequest,
)
from hypolab.models.analysis import AnalysisReport
from hypolab.models.experiment import Experiment, ExperimentResult, ExperimentStatus
from hypolab.models.hypothesis import SuccessCriteria

router = APIRouter(prefix="/experiments", tags=["experiments"])


@router.post("", response_model=Experiment, status_code=201)
def create_experiment(
    request: ExperimentCreateRequest,
    workflow: WorkflowDep,
) -> Experiment:
    return workflow.create_experiment(
        hypothesis_id=request.hypothesis_id,
        title=request.title,
        type=request.type,
        description=request.description,
        methodology=request.methodology,
        success_metrics=request.success_metrics,
        created_by=request.created_by,
    )


@router.get("", response_model=ExperimentListResponse)
def list_experiments(
    workflow: WorkflowDep,
    hypothesis_id: int | None = None,
    status: ExperimentStatus | None = None,
) -> ExperimentListResponse:
    experiments = workflow.db.list_experiments(hypothesis_id=hypothesis_id, status=status)
    return ExperimentListResponse(experiments=experiments, total=len(experiments))


@router.get("/{experiment_id}", response_model=Experiment)
def get_experiment(experiment_id: int, workflow: WorkflowDep) -> Experiment:
    return workflow.get_experiment(experiment_id)


@router.post("/{experiment_id}/status", response_model=Experiment)
def change_status(
    experiment_id: int,
    request: ExperimentStatusRequest,
    workflow: WorkflowDep,
) -> Experiment:
    return workflow.change_experiment_status(experiment_id, request.status)


@router.get("/{experiment_id}/results", response_model=ResultListResponse)
def list_results(experiment_id: int, workflow: WorkflowDep) -> ResultListResponse:
    results = workflow.list_results(experiment_id)
    return ResultListResponse(results=results, total=len(results))


@router.post("/{experiment_id}/results", response_model=ExperimentResult, status_code=201)
def record_result(
    experiment_id: int,
    request: ResultRequest,
    workflow: WorkflowDep,
) -> ExperimentResult:
    return workflow.record_result(
        experiment_id,
        metric_name=request.metric_name,
        value=request.value,
        unit=request.unit,
        notes=request.notes,
    )


@router.post(
    "/{experiment_id}/success-criteria", response_model=SuccessCriteria, status_code=201
)
def add_success_criterion(
    experiment_id: int,
    request: SuccessCriterionRequest,
    workflow: WorkflowDep,
) -> SuccessCriteria:
    return workflow.add_success_criterion(
        name=request.name,
        target_value=request.target_value,
        unit=request.unit,
        description=request.description,
        experiment_id=experiment_id,
    )


@router.get("/{experiment_id}/analysis", response_model=AnalysisReport)
def analyze_experiment(experiment_id: int, workflow: WorkflowDep) -> AnalysisReport:
    return workflow.analyze_experiment(experiment_id)


@router.post("/{experiment_id}/apply-recommendation", response_model=ApplyRecommendationResponse)
def apply_recommendation(
    experiment_id: int,
    request: ActorRequest,
    workflow: WorkflowDep,
) -> ApplyRecommendationResponse:
    report, hypothesis = workflow.apply_recommendation(experiment_id, request.actor)
    return ApplyRecommendationResponse(
        applied=hypothesis.status != report.hypothesis.current_status,
        hypothesis=hypothesis,
        report=report,
    )
