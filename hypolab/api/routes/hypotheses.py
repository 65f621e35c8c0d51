"""Hypothesis endpoints: CRUD, research, scoring and gated transitions."""

from __future__ import annotations

from fastapi import APIRouter

from hypolab.api.deps import WorkflowDep
from hypolab.api.schemas import (
    ActorRequest,
    DeskResearchRequest,
    HypothesisCreateRequest,
    HypothesisIceScoreRequest,
    HypothesisListResponse,
    HypothesisUpdateRequest,
    ReadinessResponse,
    RiceScoreRequest,
    StageTransitionRequest,
    SuccessCriterionRequest,
    TransitionListResponse,
    TransitionOptionResponse,
    TransitionRequest,
)
from hypolab.models.hypothesis import Hypothesis, HypothesisStatus, SuccessCriteria

router = APIRouter(prefix="/hypotheses", tags=["hypotheses"])


@router.post("", response_model=Hypothesis, status_code=201)
def create_hypothesis(
    request: HypothesisCreateRequest,
    workflow: WorkflowDep,
) -> Hypothesis:
    return workflow.create_hypothesis(
        idea_id=request.idea_id,
        title=request.title,
        statement=request.statement,
        description=request.description,
        confidence_level=request.confidence_level,
        created_by=request.created_by,
    )


@router.get("", response_model=HypothesisListResponse)
def list_hypotheses(
    workflow: WorkflowDep,
    idea_id: int | None = None,
    status: HypothesisStatus | None = None,
) -> HypothesisListResponse:
    hypotheses = workflow.db.list_hypotheses(idea_id=idea_id, status=status)
    return HypothesisListResponse(hypotheses=hypotheses, total=len(hypotheses))


@router.get("/{hypothesis_id}", response_model=Hypothesis)
def get_hypothesis(hypothesis_id: int, workflow: WorkflowDep) -> Hypothesis:
    return workflow.get_hypothesis(hypothesis_id)


@router.patch("/{hypothesis_id}", response_model=Hypothesis)
def update_hypothesis(
    hypothesis_id: int,
    request: HypothesisUpdateRequest,
    workflow: WorkflowDep,
) -> Hypothesis:
    return workflow.update_description(hypothesis_id, request.description)


@router.delete("/{hypothesis_id}", status_code=204)
def delete_hypothesis(hypothesis_id: int, workflow: WorkflowDep) -> None:
    workflow.delete_hypothesis(hypothesis_id)


@router.get("/{hypothesis_id}/readiness", response_model=ReadinessResponse)
def get_readiness(hypothesis_id: int, workflow: WorkflowDep) -> ReadinessResponse:
    facts, options = workflow.readiness(hypothesis_id)
    return ReadinessResponse(
        hypothesis_id=hypothesis_id,
        facts=facts,
        ready_for_level_2=facts.ready_for_level_2,
        available_transitions=[
            TransitionOptionResponse(
                status=o.status,
                allowed=o.allowed,
                missing=[f.value for f in o.missing],
            )
            for o in options
        ],
    )


@router.put("/{hypothesis_id}/rice-score", response_model=Hypothesis)
def submit_rice_score(
    hypothesis_id: int,
    request: RiceScoreRequest,
    workflow: WorkflowDep,
) -> Hypothesis:
    return workflow.submit_rice_score(
        hypothesis_id, request.reach, request.impact, request.confidence, request.effort
    )


@router.put("/{hypothesis_id}/ice-score", response_model=Hypothesis)
def submit_ice_score(
    hypothesis_id: int,
    request: HypothesisIceScoreRequest,
    workflow: WorkflowDep,
) -> Hypothesis:
    return workflow.submit_ice_score_for_hypothesis(
        hypothesis_id, request.impact, request.confidence, request.ease
    )


@router.put("/{hypothesis_id}/desk-research", response_model=Hypothesis)
def submit_desk_research(
    hypothesis_id: int,
    request: DeskResearchRequest,
    workflow: WorkflowDep,
) -> Hypothesis:
    return workflow.submit_desk_research(
        hypothesis_id,
        notes=request.notes,
        sources=request.sources,
        risks=request.risks,
        opportunities=request.opportunities,
    )


@router.post(
    "/{hypothesis_id}/success-criteria", response_model=SuccessCriteria, status_code=201
)
def add_success_criterion(
    hypothesis_id: int,
    request: SuccessCriterionRequest,
    workflow: WorkflowDep,
) -> SuccessCriteria:
    return workflow.add_success_criterion(
        name=request.name,
        target_value=request.target_value,
        unit=request.unit,
        description=request.description,
        hypothesis_id=hypothesis_id,
    )


@router.post("/{hypothesis_id}/transition", response_model=Hypothesis)
def request_transition(
    hypothesis_id: int,
    request: TransitionRequest,
    workflow: WorkflowDep,
) -> Hypothesis:
    return workflow.request_transition(hypothesis_id, request.target, request.actor)


@router.post("/{hypothesis_id}/stage-transition", response_model=Hypothesis)
def request_stage_transition(
    hypothesis_id: int,
    request: StageTransitionRequest,
    workflow: WorkflowDep,
) -> Hypothesis:
    return workflow.request_stage_transition(hypothesis_id, request.target, request.actor)


@router.post("/{hypothesis_id}/promote", response_model=Hypothesis)
def promote_to_level_2(
    hypothesis_id: int,
    request: ActorRequest,
    workflow: WorkflowDep,
) -> Hypothesis:
    return workflow.promote_to_level_2(hypothesis_id, request.actor)


@router.get("/{hypothesis_id}/transitions", response_model=TransitionListResponse)
def list_transitions(hypothesis_id: int, workflow: WorkflowDep) -> TransitionListResponse:
    transitions = workflow.list_transitions(hypothesis_id)
    return TransitionListResponse(transitions=transitions, total=len(transitions))
