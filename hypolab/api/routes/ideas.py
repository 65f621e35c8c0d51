"""Idea endpoints: CRUD, scoring and selection."""

from __future__ import annotations

from fastapi import APIRouter

from hypolab.api.deps import WorkflowDep
from hypolab.api.schemas import (
    FunnelResponse,
    IceScoreListResponse,
    IceScoreRequest,
    IceScoreSubmitResponse,
    IdeaCreateRequest,
    IdeaListResponse,
    RiceScoreRequest,
)
from hypolab.engine.scoring import ice_average
from hypolab.models.idea import Idea, IdeaStatus

router = APIRouter(prefix="/ideas", tags=["ideas"])


@router.post("", response_model=Idea, status_code=201)
def create_idea(
    request: IdeaCreateRequest,
    workflow: WorkflowDep,
) -> Idea:
    return workflow.submit_idea(
        title=request.title,
        description=request.description,
        category=request.category,
        priority=request.priority,
        created_by=request.created_by,
    )


@router.get("", response_model=IdeaListResponse)
def list_ideas(
    workflow: WorkflowDep,
    status: IdeaStatus | None = None,
) -> IdeaListResponse:
    ideas = workflow.db.list_ideas(status)
    return IdeaListResponse(ideas=ideas, total=len(ideas))


@router.get("/{idea_id}", response_model=Idea)
def get_idea(idea_id: int, workflow: WorkflowDep) -> Idea:
    return workflow.get_idea(idea_id)


@router.delete("/{idea_id}", status_code=204)
def delete_idea(idea_id: int, workflow: WorkflowDep) -> None:
    workflow.delete_idea(idea_id)


@router.put("/{idea_id}/rice-score", response_model=Idea)
def score_idea(
    idea_id: int,
    request: RiceScoreRequest,
    workflow: WorkflowDep,
) -> Idea:
    return workflow.score_idea(
        idea_id, request.reach, request.impact, request.confidence, request.effort
    )


@router.get("/{idea_id}/ice-scores", response_model=IceScoreListResponse)
def list_ice_scores(idea_id: int, workflow: WorkflowDep) -> IceScoreListResponse:
    scores = workflow.list_ice_scores(idea_id)
    return IceScoreListResponse(scores=scores, average=ice_average(scores), total=len(scores))


@router.put("/{idea_id}/ice-scores", response_model=IceScoreSubmitResponse)
def submit_ice_score(
    idea_id: int,
    request: IceScoreRequest,
    workflow: WorkflowDep,
) -> IceScoreSubmitResponse:
    score, idea = workflow.submit_ice_score(
        idea_id,
        user_id=request.user_id,
        impact=request.impact,
        confidence=request.confidence,
        ease=request.ease,
        comment=request.comment,
    )
    return IceScoreSubmitResponse(score=score, idea=idea)


@router.delete("/{idea_id}/ice-scores/{user_id}", response_model=Idea)
def remove_ice_score(idea_id: int, user_id: str, workflow: WorkflowDep) -> Idea:
    return workflow.remove_ice_score(idea_id, user_id)


@router.post("/{idea_id}/select", response_model=Idea)
def select_idea(idea_id: int, workflow: WorkflowDep) -> Idea:
    return workflow.select_idea(idea_id)


@router.get("/{idea_id}/funnel", response_model=FunnelResponse)
def idea_funnel(idea_id: int, workflow: WorkflowDep) -> FunnelResponse:
    return FunnelResponse(**workflow.idea_funnel(idea_id))
